"""
Prompt templates for verbatim answering.

Both passes ask the model to copy a quotation from the context or to
reply with the NOT_FOUND sentinel. The retry pass drops the
conversation memory and repeats the substring requirement.
"""

from __future__ import annotations

from typing import Sequence

from groundrag.schemas.answer import HistoryMessage

NOT_FOUND = "TIDAK DITEMUKAN"

FIRST_PASS_SYSTEM = "Kamu hanya boleh menyalin kutipan dari konteks."
RETRY_SYSTEM = "Output wajib kutipan persis dari konteks atau TIDAK DITEMUKAN."

BASE_RULES = f"""ATURAN KETAT (WAJIB):
1) Jawaban HARUS berupa KUTIPAN VERBATIM dari KONTEKS (copy-paste persis, jangan ubah 1 karakter pun).
2) DILARANG menambah kata, menjelaskan, menyimpulkan, atau memparafrase.
3) DILARANG menulis pembuka/penutup seperti "Berdasarkan konteks...".
4) Jika tidak ada kalimat yang menjawab, balas tepat: {NOT_FOUND}
5) Jawaban dalam paragraf yang tetap harus verbatim.
6) Jangan pilih header/footer (email, URL, nomor slide, Program Studi, STT).
7) Jangan output kepotong; lanjutkan sampai kalimat/kutipan selesai."""

FIRST_PASS_TEMPLATE = """Kamu adalah asisten PPKN berbasis RAG.

{rules}

MEMORY:
{history}

KONTEKS:
{context}

PERTANYAAN:
{question}

Jawaban:"""

RETRY_TEMPLATE = """{rules}

PENTING:
- Output kamu HARUS 100% substring dari KONTEKS.
- Jika ragu: {not_found}

KONTEKS:
{context}

PERTANYAAN:
{question}

Jawaban:"""


def format_history(history: Sequence[HistoryMessage], window: int = 6) -> str:
    """Render the last ``window`` messages as ``User:`` / ``AI:`` lines."""
    if window <= 0:
        return ""
    recent = list(history)[-window:]
    return "\n".join(
        f"{'User' if m.sender == 'user' else 'AI'}: {m.text}" for m in recent
    )


def first_pass_prompt(question: str, context: str, history_text: str) -> str:
    return FIRST_PASS_TEMPLATE.format(
        rules=BASE_RULES,
        history=history_text,
        context=context,
        question=question,
    ).strip()


def retry_prompt(question: str, context: str) -> str:
    return RETRY_TEMPLATE.format(
        rules=BASE_RULES,
        not_found=NOT_FOUND,
        context=context,
        question=question,
    ).strip()
