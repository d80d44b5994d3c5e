"""Shared fixtures: a small SCSS project on disk and a quiet coordinator."""

from pathlib import Path

import pytest
from rich.console import Console

from scss_bundler.config import BundlerConfig
from scss_bundler.coordinator import Coordinator


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path):
    """Two entries sharing one bundler-imported partial."""
    src = tmp_path / "scss"
    write(src / "a.scss", '@import "!bundler/_p.scss";\n#a { color: red; }\n')
    write(src / "b.scss", '@import "!bundler/_p.scss";\n#b { color: green; }\n')
    write(src / "_p.scss", "span { font-weight: bold; }\n")
    write(src / "_q.scss", "em { color: blue; }\n")
    return tmp_path


@pytest.fixture
def config(project):
    return BundlerConfig(
        source_dir="scss",
        out_dir="dist",
        shared_path="dist/common.css",
        output_style="compressed",
        base_dir=project,
    )


@pytest.fixture
def coordinator(config):
    return Coordinator(config, console=Console(quiet=True))
