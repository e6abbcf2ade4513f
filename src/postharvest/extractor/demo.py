"""
Fixed sample post for previewing the API and UI without network access.
"""

from __future__ import annotations

from .models import DocumentItem, ExtractedContent, ImageItem, VideoItem

DEMO_TEXT = """🚀 Excited to share our latest innovation in AI technology! Our team has been working tirelessly to develop a revolutionary machine learning platform that will transform how businesses approach data analytics. The future of intelligent automation is here, and we're proud to be leading the charge.

Key highlights:
✅ 40% faster processing speed
✅ Enhanced accuracy with 99.2% precision
✅ Seamless integration with existing systems
✅ Cost-effective solution for enterprises

Thank you to everyone who supported this journey. Looking forward to the amazing possibilities ahead!

#Innovation #Technology #AI #MachineLearning #Future #Startup #Tech"""

_UNSPLASH_PARAMS = "ixlib=rb-4.0.3&auto=format&fit=crop&w=800&h=600"


def demo_content() -> ExtractedContent:
    """Return the sample post. Deterministic; performs no I/O."""
    return ExtractedContent(
        text=DEMO_TEXT,
        images=[
            ImageItem(
                url=f"https://images.unsplash.com/photo-1551288049-bebda4e38f71?{_UNSPLASH_PARAMS}",
                alt="AI technology dashboard interface showing analytics",
                filename="ai-dashboard.jpg",
            ),
            ImageItem(
                url=f"https://images.unsplash.com/photo-1497366216548-37526070297c?{_UNSPLASH_PARAMS}",
                alt="Modern office space with technology",
                filename="office-tech.jpg",
            ),
            ImageItem(
                url=f"https://images.unsplash.com/photo-1522071820081-009f0129c71c?{_UNSPLASH_PARAMS}",
                alt="Team collaboration meeting",
                filename="team-collaboration.jpg",
            ),
        ],
        videos=[
            VideoItem(
                url="https://sample-videos.com/zip/10/mp4/SampleVideo_1280x720_1mb.mp4",
                title="Product Demo Video",
                duration="2:45",
                filename="product-demo.mp4",
            ),
        ],
        documents=[
            DocumentItem(
                url="https://www.w3.org/WAI/ER/tests/xhtml/testfiles/resources/pdf/dummy.pdf",
                title="AI Innovation Whitepaper.pdf",
                type="PDF Document",
                size="2.3 MB",
                filename="ai-whitepaper.pdf",
            ),
            DocumentItem(
                url="https://file-examples.com/storage/fe68c1a5c4b6b7a6f42ac4e/2017/10/file_example_PPT_1MB.ppt",
                title="Product Roadmap 2024.pptx",
                type="PowerPoint Presentation",
                size="5.7 MB",
                filename="roadmap-2024.pptx",
            ),
        ],
    )
