import pytest
import sys
from pathlib import Path

# Add src to sys.path so we can import paper_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from paper_toolkit.core.models import PaperHeader, Question  # noqa: E402
from paper_toolkit.builder.output.math_renderer import MathRenderer  # noqa: E402


# Common test fixtures
@pytest.fixture
def make_question():
    """Factory for questions with sensible defaults."""
    counter = {"n": 0}

    def _make(marks=1, type="mcq", id=None, text=None, difficulty="easy", chapter="Optics", topic="-"):
        counter["n"] += 1
        qid = id or f"q{counter['n']}"
        return Question(
            id=qid,
            text=text if text is not None else f"Question text for {qid}",
            type=type,
            difficulty=difficulty,
            chapter=chapter,
            topic=topic,
            marks=marks,
        )

    return _make


@pytest.fixture
def sample_pool(make_question):
    """Five 1-mark MCQs and three 2-mark short answers."""
    mcqs = [make_question(marks=1, type="mcq", id=f"m{i}") for i in range(1, 6)]
    shorts = [
        make_question(marks=2, type="short_answer", id=f"s{i}", difficulty="medium")
        for i in range(1, 4)
    ]
    return mcqs + shorts


@pytest.fixture
def sample_header():
    return PaperHeader(
        title="Unit Test",
        institution="Springfield High",
        board="GSEB",
        standard="10",
        subject="Physics",
        duration="1 Hour",
        instructions="Answer all questions.",
    )


@pytest.fixture
def plain_math():
    """Math renderer that never produces images."""
    return MathRenderer(enabled=False)
