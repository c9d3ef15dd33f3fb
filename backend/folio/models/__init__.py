"""
SQLAlchemy models
"""
from folio.core.database import Base
from folio.models.agent_task import AgentTask, AgentTaskStatus  # noqa: F401
from folio.models.analytics import ChatAnalytics, PageView  # noqa: F401
from folio.models.blog_post import (BlogCategory, BlogPost,  # noqa: F401
                                    BlogPostSource, BlogPostStatus)
from folio.models.chat_history import ChatHistoryMessage, ChatRole  # noqa: F401
from folio.models.contact import ContactMessage  # noqa: F401
from folio.models.module import Module  # noqa: F401
from folio.models.newsletter import (CampaignStatus,  # noqa: F401
                                     NewsletterCampaign, NewsletterSubscriber,
                                     SubscriberStatus)
from folio.models.page import Page, PageBlock  # noqa: F401
from folio.models.project import Project, ProjectImage  # noqa: F401
from folio.models.site import (ChatSettings, FeaturedIn, NavLink,  # noqa: F401
                               QuickAction)

__all__ = [
    "Base",
    "AgentTask",
    "AgentTaskStatus",
    "BlogCategory",
    "BlogPost",
    "BlogPostSource",
    "BlogPostStatus",
    "CampaignStatus",
    "ChatAnalytics",
    "ChatHistoryMessage",
    "ChatRole",
    "ChatSettings",
    "ContactMessage",
    "FeaturedIn",
    "Module",
    "NavLink",
    "NewsletterCampaign",
    "NewsletterSubscriber",
    "Page",
    "PageBlock",
    "PageView",
    "Project",
    "ProjectImage",
    "QuickAction",
    "SubscriberStatus",
]
