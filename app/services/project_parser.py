"""Installation gallery built from photo filenames.

Filenames follow ``<First Last> <City> IL <size>kW <Month> <Year> [<n>].<ext>``,
e.g. ``Cole Hendrix Fithian IL 4.05kW Jun 2025.jpeg``. Photos without a
number are the main photo of their project.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

FILENAME_RE = re.compile(
    r"^(\w+\s+\w+)\s+(.+?)\s+(IL|Illinois)\s+(\d+(?:\.\d+)?)\s*kW\s+"
    r"(Jan|January|Feb|February|Mar|March|Apr|April|May|Jun|June|Jul|July|Aug|August|"
    r"Sep|September|Oct|October|Nov|November|Dec|December)\s+(\d{4})(?:\s+(\d+))?$",
    re.IGNORECASE,
)
GALLERY_URL_PREFIX = "/installations"
IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp"}
SAVINGS_PER_KW = 145
CHICAGOLAND_CITIES = ("chicago", "aurora", "naperville")
_MONTHS = ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"]


@dataclass
class ProjectPhoto:
    filename: str
    path: str
    customer_name: str
    city: str
    state: str
    system_size: str
    install_date: str
    extension: str
    photo_number: Optional[int] = None


@dataclass
class GroupedProject:
    id: str
    customer_name: str
    city: str
    state: str
    system_size: str
    install_date: str
    location: str
    photos: list = field(default_factory=list)

    @property
    def main_photo(self) -> ProjectPhoto:
        return self.photos[0]

    @property
    def additional_photos(self) -> list:
        return self.photos[1:]

    @property
    def size_kw(self) -> float:
        return _size_kw(self.system_size)


def parse_photo_filename(filename: str) -> Optional[ProjectPhoto]:
    if "." not in filename:
        return None
    stem, ext = filename.rsplit(".", 1)
    match = FILENAME_RE.match(stem)
    if not match:
        logger.warning("Failed to parse gallery filename: %s", filename)
        return None
    customer_name, city, state, size, month, year, number = match.groups()
    return ProjectPhoto(
        filename=filename,
        path=f"{GALLERY_URL_PREFIX}/{filename}",
        customer_name=customer_name.strip(),
        city=city.strip(),
        state=state.strip(),
        system_size=f"{size}kW",
        install_date=f"{month} {year}",
        extension=f".{ext}",
        photo_number=int(number) if number else None,
    )


def _size_kw(system_size: str) -> float:
    match = re.search(r"\d+(?:\.\d+)?", system_size)
    return float(match.group()) if match else 0.0


def _install_sort_key(install_date: str) -> tuple[int, int]:
    month, year = install_date.split()
    return int(year), _MONTHS.index(month[:3].lower()) + 1


def group_photos_by_project(photos: Iterable[ProjectPhoto]) -> list[GroupedProject]:
    groups: dict[str, list[ProjectPhoto]] = {}
    for photo in photos:
        key = f"{photo.customer_name}_{photo.city}_{photo.state}_{photo.system_size}_{photo.install_date}"
        groups.setdefault(key, []).append(photo)

    projects = []
    for key, group in groups.items():
        group.sort(key=lambda p: (p.photo_number is not None, p.photo_number or 0))
        main = group[0]
        projects.append(GroupedProject(
            id=re.sub(r"[^a-z0-9]", "-", key.lower()),
            customer_name=main.customer_name,
            city=main.city,
            state=main.state,
            system_size=main.system_size,
            install_date=main.install_date,
            location=f"{main.city}, {main.state}",
            photos=group,
        ))

    projects.sort(key=lambda p: _install_sort_key(p.install_date), reverse=True)
    return projects


def estimated_savings(system_size: str) -> str:
    return f"${round(_size_kw(system_size) * SAVINGS_PER_KW):,}"


def project_description(project: GroupedProject) -> str:
    size = project.size_kw
    text = f"Professional solar installation in {project.location} featuring a {project.system_size} system. "
    if size >= 15:
        text += "Large-scale residential installation with high-efficiency panels designed for maximum energy production. "
    elif size >= 10:
        text += "Comprehensive solar solution with premium panels and advanced monitoring capabilities. "
    elif size >= 7:
        text += "Mid-size installation optimized for excellent energy production and cost savings. "
    else:
        text += "Compact, efficient solar system designed to maximize available roof space. "
    return text + "Complete system includes professional installation, monitoring, and comprehensive warranty coverage."


def project_tags(project: GroupedProject, recent_year: str = "2025") -> list[str]:
    tags = ["Residential", "Illinois Install"]
    size = project.size_kw
    if size >= 15:
        tags.append("Large System")
    elif size >= 10:
        tags.append("Premium Install")
    else:
        tags.append("Efficient Design")
    if project.install_date.split()[1] == recent_year:
        tags.append("Recent Install")
    city = project.city.lower()
    tags.append("Chicagoland" if any(c in city for c in CHICAGOLAND_CITIES) else "Downstate IL")
    return tags


def load_gallery(directory: Path) -> list[GroupedProject]:
    """Parse every image in ``directory``; unparseable names are skipped."""
    if not directory.is_dir():
        logger.warning("Gallery directory %s not found", directory)
        return []
    photos = []
    for path in sorted(directory.iterdir()):
        if path.suffix.lower() not in IMAGE_SUFFIXES:
            continue
        photo = parse_photo_filename(path.name)
        if photo:
            photos.append(photo)
    return group_photos_by_project(photos)
