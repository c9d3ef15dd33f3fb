"""
Visitor analytics: page views, chat sessions and the dashboard summary
"""
import re
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from folio.core.errors import NotFoundError
from folio.core.logging_config import LoggingConfig
from folio.models.analytics import ChatAnalytics, PageView

logger = LoggingConfig.get_logger(__name__)

PROJECT_PREFIX = "project/"
TOP_N = 5


def slug_to_title(slug: str) -> str:
    """my-project -> My Project"""
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), slug.replace("-", " "))


class AnalyticsService:
    def __init__(self, db: Session):
        self.db = db

    def track_page_view(
        self,
        page_slug: str,
        visitor_id: Optional[str] = None,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
    ) -> PageView:
        view = PageView(
            page_slug=page_slug,
            visitor_id=visitor_id,
            user_agent=user_agent,
            referrer=referrer or None,
        )
        try:
            self.db.add(view)
            self.db.commit()
            self.db.refresh(view)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to track page view: {e}", exc_info=True)
            raise
        return view

    def start_chat_session(self, visitor_id: Optional[str] = None) -> ChatAnalytics:
        session = ChatAnalytics(visitor_id=visitor_id, message_count=0)
        try:
            self.db.add(session)
            self.db.commit()
            self.db.refresh(session)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to start chat session: {e}", exc_info=True)
            raise
        return session

    def update_chat_session(self, session_id: UUID, message_count: int) -> ChatAnalytics:
        session = self.db.query(ChatAnalytics).filter(ChatAnalytics.id == session_id).first()
        if session is None:
            raise NotFoundError(f"Chat session {session_id} not found")
        session.message_count = message_count
        session.session_end = datetime.now(timezone.utc)
        try:
            self.db.commit()
            self.db.refresh(session)
        except Exception:
            self.db.rollback()
            raise
        return session

    def summary(self, days: int = 30) -> Dict[str, Any]:
        """Dashboard numbers for the last `days` days"""
        since = datetime.now(timezone.utc) - timedelta(days=days)
        page_views = (
            self.db.query(PageView)
            .filter(PageView.created_at >= since)
            .order_by(PageView.created_at)
            .all()
        )
        chats = self.db.query(ChatAnalytics).filter(ChatAnalytics.created_at >= since).all()

        page_counts: Counter = Counter()
        project_counts: Counter = Counter()
        views_by_day: Counter = Counter()
        for view in page_views:
            if view.page_slug.startswith(PROJECT_PREFIX):
                project_counts[view.page_slug[len(PROJECT_PREFIX):]] += 1
            else:
                page_counts[view.page_slug] += 1
            views_by_day[view.created_at.date().isoformat()] += 1

        return {
            "totalPageViews": len(page_views),
            "uniqueVisitors": len({view.visitor_id for view in page_views}),
            "totalProjectViews": sum(project_counts.values()),
            "totalChatSessions": len(chats),
            "totalChatMessages": sum(chat.message_count or 0 for chat in chats),
            "topPages": [
                {"page_slug": slug, "count": count}
                for slug, count in page_counts.most_common(TOP_N)
            ],
            "topProjects": [
                {"project_id": slug, "title": slug_to_title(slug), "count": count}
                for slug, count in project_counts.most_common(TOP_N)
            ],
            "viewsByDay": [
                {"date": date, "views": views_by_day[date]}
                for date in sorted(views_by_day)
            ],
        }
