"""
File handler for draft exports.

Articles generated with ``--dry-run`` (or exported for review) are written
under ``<output_dir>/drafts/<slug>/`` as a metadata file plus the markdown
body, and can be loaded back for scoring.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Literal

import yaml

from src.utils.logger import get_logger

logger = get_logger(__name__)

DraftFormat = Literal["yaml", "json"]


class FileHandler:
    """Handler for file I/O operations."""

    @staticmethod
    def read_file(file_path: Path) -> str:
        """
        Read file contents.

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        return file_path.read_text(encoding="utf-8")

    @staticmethod
    def write_file(file_path: Path, content: str) -> None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        logger.debug(f"Wrote {len(content)} characters to {file_path}")

    @staticmethod
    def read_json(file_path: Path) -> dict[str, Any]:
        return json.loads(FileHandler.read_file(file_path))

    @staticmethod
    def write_json(file_path: Path, data: dict[str, Any], indent: int = 2) -> None:
        content = json.dumps(data, indent=indent, ensure_ascii=False, default=str)
        FileHandler.write_file(file_path, content)

    @staticmethod
    def read_yaml(file_path: Path) -> dict[str, Any]:
        data = yaml.safe_load(FileHandler.read_file(file_path))
        return data if data else {}

    @staticmethod
    def write_yaml(file_path: Path, data: dict[str, Any]) -> None:
        content = yaml.safe_dump(
            data,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )
        FileHandler.write_file(file_path, content)

    @staticmethod
    def draft_dir(output_dir: Path, slug: str) -> Path:
        return output_dir / "drafts" / slug

    @staticmethod
    def save_article_draft(
        document: dict[str, Any],
        output_dir: Path,
        fmt: DraftFormat = "yaml",
    ) -> Path:
        """
        Export an article document for review.

        The markdown body goes to ``content.md`` (one file per locale for
        multilingual documents) and everything else to ``article.yaml`` or
        ``article.json``.

        Args:
            document: Article document as it would be stored (camelCase keys)
            output_dir: Base output directory
            fmt: Metadata file format

        Returns:
            Path of the metadata file
        """
        slug = document.get("slug") or datetime.now().strftime("draft-%Y%m%d-%H%M%S")
        target = FileHandler.draft_dir(output_dir, slug)

        content = document.get("content", "")
        if isinstance(content, dict):
            for locale, body in content.items():
                FileHandler.write_file(target / f"content.{locale}.md", body)
        else:
            FileHandler.write_file(target / "content.md", content)

        data = dict(document)
        data["exportedAt"] = datetime.now().isoformat()
        path = target / f"article.{fmt}"
        if fmt == "json":
            FileHandler.write_json(path, data)
        else:
            FileHandler.write_yaml(path, json.loads(json.dumps(data, default=str)))

        logger.info(f"Draft saved to {path}")
        return path

    @staticmethod
    def load_article_draft(path: Path) -> dict[str, Any]:
        """Load an exported article (metadata file or its directory)."""
        if path.is_dir():
            candidates = [path / "article.yaml", path / "article.json"]
            path = next((p for p in candidates if p.exists()), candidates[0])

        if path.suffix == ".json":
            return FileHandler.read_json(path)
        return FileHandler.read_yaml(path)
