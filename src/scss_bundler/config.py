"""Configuration management for scss-bundler."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from scss_bundler.errors import ConfigError

DEFAULT_CONFIG_FILENAME = "scss-bundler.yaml"

OUTPUT_STYLES = ("nested", "expanded", "compact", "compressed")


@dataclass
class BundlerConfig:
    """Configuration for a scss-bundler run."""

    source_dir: str = "./scss"
    out_dir: str = "./dist"
    shared_path: str = "./dist/common.css"
    verbose: bool = False
    output_style: str = "expanded"

    # Directory relative paths are resolved against; not written to YAML
    base_dir: Path | None = None

    def __post_init__(self):
        if self.output_style not in OUTPUT_STYLES:
            raise ConfigError(
                f"Unknown output_style {self.output_style!r}; "
                f"expected one of {', '.join(OUTPUT_STYLES)}"
            )

    @classmethod
    def load(cls, path: str | Path | None = None) -> BundlerConfig:
        """Load config from a YAML file. Falls back to defaults if file missing."""
        explicit = path is not None
        if path is None:
            path = Path.cwd() / DEFAULT_CONFIG_FILENAME

        path = Path(path)
        if not path.exists():
            if explicit:
                raise ConfigError(f"Config file {path} doesn't exist")
            return cls(base_dir=Path.cwd())

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Could not parse {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping of options")

        known = {f.name for f in fields(cls)} - {"base_dir"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown option(s) in {path}: {', '.join(unknown)}")

        return cls(
            source_dir=str(data.get("source_dir", cls.source_dir)),
            out_dir=str(data.get("out_dir", cls.out_dir)),
            shared_path=str(data.get("shared_path", cls.shared_path)),
            verbose=bool(data.get("verbose", cls.verbose)),
            output_style=data.get("output_style", cls.output_style),
            base_dir=path.resolve().parent,
        )

    def save(self, path: str | Path | None = None) -> Path:
        """Save config to a YAML file."""
        if path is None:
            path = Path.cwd() / DEFAULT_CONFIG_FILENAME

        path = Path(path)
        data = {
            "source_dir": self.source_dir,
            "out_dir": self.out_dir,
            "shared_path": self.shared_path,
            "verbose": self.verbose,
            "output_style": self.output_style,
        }

        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        return path

    def override(self, **options) -> BundlerConfig:
        """Return a copy with every non-None option replacing the file value."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in options.items() if v is not None})
        return type(self)(**values)

    def _resolve(self, value: str) -> Path:
        base = self.base_dir or Path.cwd()
        return (base / value).resolve()

    @property
    def source_path(self) -> Path:
        return self._resolve(self.source_dir)

    @property
    def out_path(self) -> Path:
        return self._resolve(self.out_dir)

    @property
    def shared_file(self) -> Path:
        return self._resolve(self.shared_path)
