import tomllib
from dataclasses import dataclass, field
from pathlib import Path

MANIFEST_NAME = "sadl.toml"


@dataclass
class ParserConfig:
    """Parser configuration."""

    extensions: list[str] = field(default_factory=list)  # bundled extension names
    validate: bool = True


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class ProjectManifest:
    """
    Project manifest loaded from sadl.toml.

    Lists the SADL sources of a project (files or directories) together with
    the extensions to enable and the logging level for the CLI.
    """

    name: str
    version: str
    project_root: str
    sources: list[str]
    parser: ParserConfig = field(default_factory=ParserConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_manifest(path: Path) -> ProjectManifest:
    data = tomllib.loads(path.read_text(encoding="utf-8"))

    project = data.get("project", {})
    parser_data = data.get("parser", {})
    logging_data = data.get("logging", {})

    parser_config = ParserConfig(
        extensions=parser_data.get("extensions", []),
        validate=parser_data.get("validate", True),
    )
    logging_config = LoggingConfig(
        level=str(logging_data.get("level", "WARNING")).upper(),
    )

    return ProjectManifest(
        name=project.get("name", path.parent.name),
        version=project.get("version", "0.0.0"),
        project_root=str(path.parent),
        sources=project.get("sources", ["."]),
        parser=parser_config,
        logging=logging_config,
    )


def discover_sources(root: Path, manifest: ProjectManifest) -> list[Path]:
    """Return the .sadl files named by the manifest, directories searched recursively."""
    files: list[Path] = []
    for rel in manifest.sources:
        base = (root / rel).resolve()
        if not base.exists():
            continue
        if base.is_file():
            files.append(base)
        else:
            files.extend(base.rglob("*.sadl"))
    return sorted(set(files))
