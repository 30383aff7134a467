"""
Projects API

CRUD endpoints for portfolio projects. Images referenced by a project are
removed from storage when the project drops them or is deleted.
"""
import logging
from typing import Optional

import anyio
from fastapi import APIRouter, Depends, Security
from sqlalchemy.orm import Session

from apps.shared.auth import require_session, session_cookie, unauthorized, verify
from apps.shared.config import Settings, get_settings
from apps.shared.database import get_db
from apps.shared.errors import bad_request, not_found
from apps.shared.responses import SuccessResponse
from apps.projects.models import Project
from apps.projects.schemas import ProjectInput, ProjectResponse
from apps.projects.utils import (
    clean_text,
    optional_text,
    removed_images,
    slug_taken,
    slugify,
    unique_slug,
)
from apps.uploads.storage import ImageStore, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])

REQUIRED_FIELDS_MESSAGE = "Title, description, and thumbnail are required"


def project_fields(project_data: ProjectInput) -> dict:
    """
    Column values for a create or full replace, slug excluded.

    Raises:
        HTTPException: 400 if title, description or thumbnail is missing
    """
    title = clean_text(project_data.title)
    description = clean_text(project_data.description)
    thumbnail = clean_text(project_data.thumbnail)
    if not (title and description and thumbnail):
        raise bad_request(REQUIRED_FIELDS_MESSAGE)

    return {
        "title": title,
        "description": description,
        "long_description": optional_text(project_data.long_description),
        "thumbnail": thumbnail,
        "images": list(project_data.images),
        "live_url": optional_text(project_data.live_url),
        "github_url": optional_text(project_data.github_url),
        "technologies": list(project_data.technologies),
        "category": optional_text(project_data.category) or "Other",
        "featured": project_data.featured,
        "status": project_data.status,
        "order": project_data.order,
    }


def _ordered(query):
    return query.order_by(
        Project.featured.desc(), Project.order.asc(), Project.created_at.desc()
    )


@router.get("", response_model=list[ProjectResponse])
def list_projects(
    admin: bool = False,
    token: Optional[str] = Security(session_cookie),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    """
    List projects.
    Public callers only see PUBLISHED projects; ``?admin=true`` returns every
    status and requires an admin session.
    Sorted by featured first, then order (ascending), then newest.
    """
    query = db.query(Project)
    if admin:
        # Session is only looked at for the admin view
        if verify(token, settings) is None:
            raise unauthorized()
    else:
        query = query.filter(Project.status == "PUBLISHED")
    return _ordered(query).all()


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project_id: str, db: Session = Depends(get_db)):
    """Get a single project by id."""
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise not_found("Project not found")
    return project


@router.post("", response_model=ProjectResponse, status_code=201)
def create_project(
    project_data: ProjectInput,
    admin: str = Depends(require_session),
    db: Session = Depends(get_db),
):
    """
    Create a new project.
    A slug is generated from the title when none is given; a taken slug gets
    a time-based suffix instead of failing.
    """
    fields = project_fields(project_data)

    base_slug = clean_text(project_data.slug) or slugify(fields["title"]) or "project"
    slug = unique_slug(db, base_slug)
    if slug != base_slug:
        logger.info(f"Slug '{base_slug}' taken, using '{slug}'")

    project = Project(slug=slug, **fields)
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info(f"Created project {project.id} ({project.slug})")
    return project


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: str,
    project_data: ProjectInput,
    admin: str = Depends(require_session),
    db: Session = Depends(get_db),
    storage: ImageStore = Depends(get_storage),
):
    """
    Replace a project.
    Every field is taken from the request. Images the project no longer
    references are deleted from storage (best effort) before the write.
    Runs in the threadpool; the deletions are handed back to the event loop.
    """
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise not_found("Project not found")

    fields = project_fields(project_data)

    slug = clean_text(project_data.slug) or project.slug
    if slug != project.slug and slug_taken(db, slug, exclude_id=project.id):
        raise bad_request("Slug already exists")

    stale = removed_images(project, fields["thumbnail"], fields["images"])
    if stale:
        results = anyio.from_thread.run(storage.delete_many, stale)
        failed = [r.url for r in results if not r.ok]
        if failed:
            logger.warning(f"Project {project.id}: {len(failed)} stale image(s) not deleted")

    project.slug = slug
    for key, value in fields.items():
        setattr(project, key, value)

    db.commit()
    db.refresh(project)
    return project


@router.delete("/{project_id}", response_model=SuccessResponse)
def delete_project(
    project_id: str,
    admin: str = Depends(require_session),
    db: Session = Depends(get_db),
    storage: ImageStore = Depends(get_storage),
):
    """Delete a project and, best effort, every image it references."""
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise not_found("Project not found")

    urls = project.image_urls()
    if urls:
        results = anyio.from_thread.run(storage.delete_many, urls)
        failed = [r.url for r in results if not r.ok]
        if failed:
            logger.warning(f"Project {project.id}: {len(failed)} image(s) not deleted")

    db.delete(project)
    db.commit()
    logger.info(f"Deleted project {project_id}")
    return SuccessResponse()
