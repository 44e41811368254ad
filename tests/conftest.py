"""Shared fixtures: a throwaway SQLite database and a fake Typst compiler."""

import sys
import textwrap
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database import Base, get_db
from app.main import app
from app.models.template import Template
from app.services.typst import TypstCompiler, get_compiler

# Stands in for `typst compile <in> <out>`: fails on FAIL, hangs on SLEEP,
# otherwise writes a "PDF" that echoes the input path and source.
FAKE_TYPST = textwrap.dedent(
    """
    import sys
    import time
    from pathlib import Path

    src, out = Path(sys.argv[-2]), Path(sys.argv[-1])
    text = src.read_text(encoding="utf-8")
    if "FAIL" in text:
        print("error: unexpected token", file=sys.stderr)
        sys.exit(1)
    if "SLEEP" in text:
        time.sleep(30)
    if "NOOUTPUT" not in text:
        out.write_bytes(b"%PDF-1.7\\n" + str(src).encode() + b"\\n" + text.encode())
    """
)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    d = tmp_path / "jobs"
    d.mkdir()
    return d


@pytest.fixture
def fake_typst(tmp_path: Path) -> list[str]:
    script = tmp_path / "fake_typst.py"
    script.write_text(FAKE_TYPST)
    return [sys.executable, str(script)]


@pytest.fixture
def compiler(fake_typst: list[str], workdir: Path) -> TypstCompiler:
    return TypstCompiler(fake_typst, timeout=10, workdir=workdir)


class RecordingCompiler(TypstCompiler):
    """Records sources instead of running a subprocess."""

    def __init__(self):
        super().__init__()
        self.sources: list[str] = []

    async def compile(self, source: str) -> bytes:
        self.sources.append(source)
        return b"%PDF-1.7 recorded"


@pytest.fixture
def recording_compiler() -> RecordingCompiler:
    return RecordingCompiler()


@pytest_asyncio.fixture
async def session_factory(tmp_path: Path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory, recording_compiler):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_compiler] = lambda: recording_compiler
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def make_template(**overrides) -> Template:
    fields = {
        "id": "tpl_invoice",
        "title": "Invoice",
        "description": "Simple payment notice",
        "price": 1500,
        "typst_content": "Pay {{amount}} by {{due}}.",
        "variables": (
            '[{"name": "amount", "type": "number", "label": "Amount", "required": true},'
            ' {"name": "due", "type": "date", "label": "Due date", "required": true}]'
        ),
        "current_version": 1,
        "is_published": True,
    }
    fields.update(overrides)
    return Template(**fields)


@pytest.fixture
def template_factory():
    return make_template
