"""Prompt templates and chain builders for the query assistant."""

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable

SUGGESTION_INSTRUCTION = (
    "Generate 5 alternative, clearer versions of the following query. "
    "Return only the queries, one per line, without any numbering or prefixes."
)

SUGGESTION_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", SUGGESTION_INSTRUCTION),
        ("human", "{query}"),
    ]
)

# The effective query goes out as the only message, with no system instruction.
ANSWER_PROMPT = ChatPromptTemplate.from_messages([("human", "{query}")])


def build_suggestion_chain(llm: BaseChatModel) -> Runnable:
    """Create a runnable chain (prompt -> model -> text) for rephrasings."""
    return SUGGESTION_PROMPT | llm | StrOutputParser()


def build_answer_chain(llm: BaseChatModel) -> Runnable:
    """Create a runnable chain (prompt -> model -> text) for final answers."""
    return ANSWER_PROMPT | llm | StrOutputParser()
