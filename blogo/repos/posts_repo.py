import asyncio
from pathlib import Path
from typing import List

from blogo.errors import FileSystemError


class FilePostsRepo:
    """Async access to the posts directory. Blocking I/O runs in a worker thread."""

    def __init__(self, posts_dir):
        self.posts_dir = Path(posts_dir)

    async def list_markdown_files(self) -> List[Path]:
        try:
            return await asyncio.to_thread(self._list_markdown_files)
        except OSError as e:
            raise FileSystemError(
                f"Failed to read posts directory {self.posts_dir}", e, path=str(self.posts_dir)
            ) from e

    def _list_markdown_files(self) -> List[Path]:
        return sorted(
            p for p in self.posts_dir.iterdir() if p.is_file() and p.suffix == ".md" and not p.name.startswith(".")
        )

    async def read_text(self, path: Path) -> str:
        try:
            return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FileSystemError(f"Failed to read file {path}", e, path=str(path)) from e

    async def write_text(self, path: Path, content: str) -> None:
        target = Path(path)
        try:
            await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(target.write_text, content, encoding="utf-8")
        except OSError as e:
            raise FileSystemError(f"Failed to write file {path}", e, path=str(path)) from e

    async def exists(self, path: Path) -> bool:
        return await asyncio.to_thread(Path(path).exists)

    def path_for(self, filename: str) -> Path:
        return self.posts_dir / filename
