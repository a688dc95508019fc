"""
Prompt templates for the Knowledge Base Assistant.
Designed for grounded answering and a fixed refusal when the context lacks the answer.
"""

from typing import List, Tuple

from core.chunking import Chunk
from core.language import HINGLISH

REFUSAL_TEMPLATE = "I don't have this information in the provided {org} knowledge base."

LANGUAGE_GUIDES = {
    HINGLISH: (
        'REPLY LANGUAGE: Hinglish (Hindi in Latin script, e.g., "{org} ka focus automation par hai"). '
        "Do NOT use Devanagari."
    ),
    "english": "REPLY LANGUAGE: English. Professional and concise.",
}

SYSTEM_PROMPT = """You are {org}'s internal assistant. Answer STRICTLY and ONLY from the provided CONTEXT (the {org} knowledge base).
If the answer is not present in the CONTEXT, reply exactly:
"{refusal}"

Rules:
- Do not invent or add external knowledge.
- Be concise and factual.
- {language_guide}"""

QA_PROMPT_TEMPLATE = """{system_prompt}

QUESTION:
{question}

CONTEXT (numbered blocks):
{context}

Format:
- Direct answer grounded in context.
- If not found: "{refusal}"
- Use the reply language specified above."""

NO_CONTEXT_MESSAGES = {
    HINGLISH: "Is sawaal ka jawab {org} knowledge base mein nahi mila. Kripya sawaal thoda alag tarike se puchhiye.",
    "english": "I couldn't find anything relevant to that in the {org} knowledge base. Try rephrasing your question.",
}

NOT_LOADED_MESSAGES = {
    HINGLISH: "Embeddings load nahi hue. Pehle `python app.py --build-index` chala kar knowledge base taiyaar kijiye.",
    "english": "Embeddings are not loaded. Please run `python app.py --build-index` to prepare the knowledge base.",
}


def refusal_sentence(org: str = "HCA") -> str:
    return REFUSAL_TEMPLATE.format(org=org)


def build_context(hits: List[Tuple[Chunk, float]]) -> str:
    """Number the retrieved chunks 【1】, 【2】, ... in the order given (best first)."""
    return "\n\n".join(
        f"【{i}】 {chunk.text_original or chunk.text_cleaned}"
        for i, (chunk, _) in enumerate(hits, 1)
    )


def build_grounded_prompt(
    question: str,
    hits: List[Tuple[Chunk, float]],
    mode: str,
    org: str = "HCA",
) -> str:
    """Build the full grounded prompt: instructions, question, and numbered context."""
    refusal = refusal_sentence(org)
    guide = LANGUAGE_GUIDES.get(mode, LANGUAGE_GUIDES["english"]).format(org=org)
    system_prompt = SYSTEM_PROMPT.format(org=org, refusal=refusal, language_guide=guide)
    return QA_PROMPT_TEMPLATE.format(
        system_prompt=system_prompt,
        question=question,
        context=build_context(hits),
        refusal=refusal,
    )


def no_context_message(mode: str, org: str = "HCA") -> str:
    return NO_CONTEXT_MESSAGES.get(mode, NO_CONTEXT_MESSAGES["english"]).format(org=org)


def not_loaded_message(mode: str) -> str:
    return NOT_LOADED_MESSAGES.get(mode, NOT_LOADED_MESSAGES["english"])
