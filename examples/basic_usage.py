#!/usr/bin/env python3
"""
Basic usage examples for the portfolio store.

This example walks through the CQRS APIs:
1. Setting up configuration
2. Creating a project and adding images to it
3. Building and reordering the homepage carousel
4. Reading analytics
5. Cleaning up with a cascading delete
"""

from portfolio_store import (
    PortfolioStoreConfig,
    # Project CQRS APIs
    ProjectsReadApi,
    ProjectsWriteApi,
    ProjectCreate,
    ProjectUpdate,
    # Image CQRS APIs
    ImagesReadApi,
    ImagesWriteApi,
    ImageCreate,
    # Carousel CQRS APIs
    CarouselReadApi,
    CarouselWriteApi,
    CarouselItemCreate,
    CarouselPosition,
)
from portfolio_store.exceptions import ItemNotFoundError
from portfolio_store.models import LinkType, ProjectStatus


def main():
    """Demonstrate basic usage of the portfolio store."""

    # 1. Configure DynamoDB connection
    print("1. Setting up configuration...")
    config = PortfolioStoreConfig.from_env()  # Uses environment variables

    # For DynamoDB Local, you might use:
    # config = PortfolioStoreConfig.for_local_development()

    projects_read = ProjectsReadApi(config)
    projects_write = ProjectsWriteApi(config)
    images_read = ImagesReadApi(config)
    images_write = ImagesWriteApi(config)
    carousel_read = CarouselReadApi(config)
    carousel_write = CarouselWriteApi(config)

    # 2. Create a project; the id is the slug of the title
    print("2. Creating a project...")
    project = projects_write.create_project(ProjectCreate(
        title="Mountain Series",
        category="landscape",
        description="Alpine light across four seasons",
        tags={"mountains", "alps"},
    ))
    print(f"Created project: {project.project_id}")

    # 3. Add images; sortOrder continues after the last image
    print("3. Adding images...")
    for name in ("summit.jpg", "ridge.jpg"):
        image = images_write.add_image(project.project_id, ImageCreate(
            file_name=name,
            file_path=f"projects/{project.project_id}/{name}",
            dimensions={"width": 6000, "height": 4000},
            is_featured=name == "summit.jpg",
        ))
        print(f"Added {image.image_id} at sortOrder {image.sort_order}")

    # 4. Publish the project with a partial update
    print("4. Publishing...")
    project = projects_write.update_project(project.project_id, ProjectUpdate(status=ProjectStatus.PUBLISHED))
    print(f"Published at {project.published_at}, {project.image_count} images")

    details = projects_read.get_by_id(project.project_id)
    print(f"Gallery order: {[image.file_name for image in details.images]}")
    print(f"Published projects: {[p.project_id for p in projects_read.list_published()]}")
    print(f"Visible images: {len(images_read.list_for_project(project.project_id))}")

    # 5. Carousel slides and reorder
    print("5. Building the carousel...")
    slides = [
        carousel_write.create_item(CarouselItemCreate(
            title=f"Slide {n}",
            status="active",
            link_type=LinkType.PROJECT,
            link_target=project.project_id,
        ))
        for n in range(1, 4)
    ]
    carousel_write.reorder_items([
        CarouselPosition(item_id=slides[2].item_id, position=1),
        CarouselPosition(item_id=slides[0].item_id, position=3),
    ])
    print(f"Active order: {[slide.title for slide in carousel_read.list_active()]}")

    # 6. Engagement counters and analytics
    print("6. Analytics...")
    carousel_write.increment_view(slides[1].item_id)
    carousel_write.increment_view(slides[1].item_id)
    carousel_write.increment_click(slides[1].item_id)
    analytics = carousel_read.get_analytics()
    for row in analytics.items:
        print(f"   {row.title}: {row.view_count} views, {row.click_count} clicks, CTR {row.click_through_rate}%")
    print(f"   Overall CTR {analytics.summary.overall_click_through_rate}%")

    # 7. Clean up
    print("7. Cleaning up...")
    for slide in slides:
        carousel_write.delete_item(slide.item_id)
    deleted = projects_write.delete_project(project.project_id)
    print(f"Deleted {deleted} records")

    try:
        projects_read.get_by_id(project.project_id)
    except ItemNotFoundError as e:
        print(f"As expected: {e}")

    print("Done!")


if __name__ == "__main__":
    main()
