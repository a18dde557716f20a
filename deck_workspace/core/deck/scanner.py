"""
Slide discovery for project folders.

Rendered slides live as SVG files in a single directory of the project
(``svg_output`` by default). Files are ordered by name, which matches the
``01_title.svg`` / ``slide_02_intro.svg`` naming the renderer produces.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Union

from ..models.slides import Slide

logger = logging.getLogger(__name__)

SLIDE_EXTENSION = ".svg"


def list_slide_files(slides_path: Path) -> List[Path]:
    """
    List slide files in a directory.

    Args:
        slides_path: Directory holding the rendered slides

    Returns:
        Sorted SVG file paths, empty if the directory is missing
    """
    if not slides_path.exists():
        logger.debug(f"Slides directory does not exist: {slides_path}")
        return []
    if not slides_path.is_dir():
        logger.warning(f"Slides path is not a directory: {slides_path}")
        return []

    files = [
        entry for entry in slides_path.iterdir()
        if entry.is_file() and entry.suffix.lower() == SLIDE_EXTENSION
    ]
    return sorted(files, key=lambda p: p.name)


def scan_slides(
    project_path: Union[str, Path],
    slides_dir: str = "svg_output"
) -> List[Slide]:
    """
    Build the slide list of a project.

    Args:
        project_path: Project root directory
        slides_dir: Slides directory relative to the project root

    Returns:
        Slides in display order, identified by file name
    """
    project_path = Path(project_path).resolve()
    files = list_slide_files(project_path / slides_dir)

    slides = [
        Slide(id=file_path.name, path=str(file_path), index=position)
        for position, file_path in enumerate(files)
    ]
    logger.info(f"Found {len(slides)} slides in {project_path / slides_dir}")
    return slides


def watched_paths(slides: Iterable[Slide], project_root: Union[str, Path]) -> List[str]:
    """Slide paths relative to the project root, in deck order"""
    root = Path(project_root).resolve()
    paths = []
    for slide in slides:
        slide_path = Path(slide.path)
        try:
            paths.append(slide_path.resolve().relative_to(root).as_posix())
        except ValueError:
            # Outside the project: watch it by absolute path
            paths.append(str(slide_path))
    return paths
