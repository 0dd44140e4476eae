import os
import sys
from pathlib import Path
from typing import Callable

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'folio'
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


from folio.core.paths.views import ViewPathResolver
from folio.core.rendering.renderer import Renderer
from folio.core.templates.compiler import TemplateCompiler
from folio.data import clear_caches


@pytest.fixture(autouse=True)
def _isolate_folio_env(monkeypatch: pytest.MonkeyPatch):
    """Drop FOLIO_* overrides leaking from the developer's shell."""
    for key in list(os.environ):
        if key.startswith("FOLIO_"):
            monkeypatch.delenv(key, raising=False)
    clear_caches()
    yield


@pytest.fixture
def views_dir(tmp_path: Path) -> Path:
    path = tmp_path / "views"
    path.mkdir()
    return path


@pytest.fixture
def write_view(views_dir: Path) -> Callable[[str, str], Path]:
    """Write ``views/<name>.html`` and return its path."""

    def _write(name: str, content: str) -> Path:
        path = views_dir / f"{name}.html"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def resolver(tmp_path: Path) -> ViewPathResolver:
    return ViewPathResolver(tmp_path)


@pytest.fixture
def compiler(resolver: ViewPathResolver) -> TemplateCompiler:
    return TemplateCompiler(resolver)


@pytest.fixture
def render_string(compiler: TemplateCompiler) -> Callable[..., str]:
    """Compile an in-memory template and render it."""
    renderer = Renderer()

    def _render(text: str, **variables) -> str:
        return renderer.render(compiler.compile_string(text), variables)

    return _render
