"""
Seed the database with the admin account, the main gallery and default resume content.
Safe to run repeatedly: each part is only created when absent.

Usage:
    python -m gallery_cms.seed
"""
import asyncio
import logging

from gallery_cms.config import settings
from gallery_cms.database import AsyncSessionLocal, close_db, create_tables
from gallery_cms.errors import NotFoundError
from gallery_cms.services.auth_service import AuthService
from gallery_cms.services.file_manager import file_manager
from gallery_cms.services.gallery_service import GalleryService
from gallery_cms.services.resume_service import ResumeService

logger = logging.getLogger("gallery_cms.seed")

MAIN_GALLERY = {
    "slug": "main",
    "name": "Main Gallery",
    "description": "Welcome to the gallery - A collection of abstract art",
}

RESUME_CONTENT = [
    (
        "artist_statement_en",
        "Through my art, I explore the profound dialogue between structure and chaos, "
        "permanence and transience. My work investigates the invisible boundaries that shape "
        "our existence, those delicate thresholds between the physical and ethereal, the seen "
        "and unseen.\n\n"
        "I believe that boundaries are not mere limitations but are dynamic spaces of "
        "transformation. In my paintings, I seek to capture the moment when a boundary "
        "becomes a bridge.",
    ),
    (
        "artist_statement_ar",
        "من خلال فني، أستكشف الحوار العميق بين النظام والفوضى، بين الدائم والزائل. "
        "يتحرى عملي الحدود الخفية التي تشكل وجودنا.",
    ),
    (
        "artistic_philosophy_en",
        "My artistic philosophy centers on the power of texture and abstraction to evoke "
        "emotional responses. I work primarily with acrylic, experimenting with thick impasto "
        "techniques that create tactile surfaces inviting viewers to experience art beyond "
        "the visual.",
    ),
    (
        "artistic_philosophy_ar",
        "تتمحور فلسفتي الفنية حول قوة الملمس والتجريد في إثارة الاستجابات العاطفية.",
    ),
]

TIMELINE = [
    {
        "date_range": "2022 - 2024",
        "title": "Continuous Learning & Development",
        "description": "Beginning of artistic journey with focus on foundational techniques",
        "items": ["Self-study in acrylic techniques", "Experimentation with textures"],
    },
    {
        "date_range": "2024 - 2025",
        "title": "Advanced Techniques Training",
        "description": "Intensive training program in advanced painting methods",
        "items": ["Mentorship program enrollment", "Study of contemporary techniques"],
    },
    {
        "date_range": "2025 - Present",
        "title": "Professional Development",
        "description": "Training with established artists and continued education",
        "items": ["Creative practice course", "Open studio residencies"],
    },
]

EXPERTISE = [
    {
        "icon": "fas fa-paint-brush",
        "title": "Acrylic Painting",
        "description": "Textured abstract works using impasto and mixed media techniques",
    },
    {
        "icon": "fas fa-palette",
        "title": "Gouache",
        "description": "Vibrant opaque watercolor paintings with bold color compositions",
    },
    {
        "icon": "fas fa-pencil-alt",
        "title": "Drawing",
        "description": "Pencil and charcoal studies exploring form and shadow",
    },
    {
        "icon": "fas fa-water",
        "title": "Watercolor",
        "description": "Fluid transparent paintings capturing light and atmosphere",
    },
]


async def seed() -> None:
    logger.info("Creating tables...")
    await create_tables()

    async with AsyncSessionLocal() as db:
        auth = AuthService(db)
        if await auth.get_user_by_email(settings.ADMIN_EMAIL) is None:
            await auth.create_user(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
            logger.info(f"Created admin user: {settings.ADMIN_EMAIL}")
        else:
            logger.info("Admin user already exists")

        galleries = GalleryService(db, file_manager)
        try:
            await galleries.get_main()
            logger.info("Main gallery already exists")
        except NotFoundError:
            await galleries.create(is_main=True, **MAIN_GALLERY)
            logger.info("Created main gallery")

        resume = ResumeService(db)
        if not await resume.get_content_map():
            for key, content in RESUME_CONTENT:
                await resume.update_content(key, content)
            logger.info("Seeded resume content")

        if not await resume.list_timeline():
            for entry in TIMELINE:
                await resume.create_timeline_entry(**entry)
            logger.info("Seeded timeline entries")

        if not await resume.list_expertise():
            for area in EXPERTISE:
                await resume.create_expertise_area(**area)
            logger.info("Seeded expertise areas")

    logger.info("Database seeding complete")
    if settings.ADMIN_PASSWORD == "changeme123":
        logger.warning("Admin password is the default one; change it after first login")


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    async def run():
        try:
            await seed()
        finally:
            await close_db()

    asyncio.run(run())


if __name__ == "__main__":
    main()
