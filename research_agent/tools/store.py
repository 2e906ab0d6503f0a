from __future__ import annotations

import json
import os
from typing import List, Optional

from ..graph.state import Paper
from .logger import get_logger
from .text_utils import safe_name

logger = get_logger(__name__)


PAPERS_FILE = "papers.json"


def project_dir(name: str, root: str = "lit") -> str:
    return os.path.abspath(os.path.join(root, safe_name(name)))


def project_exists(name: str, root: str = "lit") -> bool:
    return os.path.exists(os.path.join(project_dir(name, root), PAPERS_FILE))


class ProjectStore:
    """Papers of one project, kept in ``<root>/<name>/papers.json``."""

    def __init__(self, name: str, root: str = "lit") -> None:
        self.name = name
        self.base_dir = project_dir(name, root)
        self.meta_path = os.path.join(self.base_dir, PAPERS_FILE)
        self.papers: List[Paper] = []
        if os.path.exists(self.meta_path):
            with open(self.meta_path, "r", encoding="utf-8") as f:
                self.papers = [Paper.model_validate(item) for item in json.load(f)]

    def save(self) -> None:
        os.makedirs(self.base_dir, exist_ok=True)
        with open(self.meta_path, "w", encoding="utf-8") as f:
            json.dump([p.model_dump() for p in self.papers], f, ensure_ascii=False, indent=2)

    def find(self, paper_id: str) -> Optional[Paper]:
        for paper in self.papers:
            if paper.id == paper_id:
                return paper
        return None

    def upsert(self, paper: Paper) -> Paper:
        for idx, existing in enumerate(self.papers):
            if existing.id == paper.id:
                # fields the incoming record leaves unset keep their stored value
                merged = existing.model_copy(update=paper.model_dump(exclude_none=True))
                self.papers[idx] = merged
                logger.debug("Updated paper %s in project %s", paper.id, self.name)
                break
        else:
            merged = paper
            self.papers.append(paper)
            logger.debug("Added paper %s to project %s", paper.id, self.name)
        self.save()
        return merged


def create_project(name: str, root: str = "lit", overwrite: bool = False) -> ProjectStore:
    exists = project_exists(name, root)
    if exists and not overwrite:
        raise FileExistsError(f'Project "{name}" already exists.')
    store = ProjectStore(name, root)
    store.save()
    logger.info("Created project %s at %s", name, store.base_dir)
    return store


def open_project(name: str, root: str = "lit") -> ProjectStore:
    if not project_exists(name, root):
        raise FileNotFoundError(f'Project "{name}" not found.')
    return ProjectStore(name, root)


def describe_project(store: ProjectStore) -> str:
    if not store.papers:
        return f'Project "{store.name}" - no papers yet.'
    rows = [
        f"- {p.id} | {p.title} ({p.year or 'n/a'}) - {', '.join(p.authors[:3])}"
        for p in store.papers
    ]
    return f'Project "{store.name}"\nPapers: {len(store.papers)}\n\n' + "\n".join(rows)
