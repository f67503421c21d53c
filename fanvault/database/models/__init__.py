# fanvault/database/models/__init__.py
from .base import Base

# Экспортируем все модели для Alembic
__all__ = [
    'Base',
    'Profile', 'CreatorProfile', 'Follow',
    'Post', 'PostLike', 'PostComment', 'ContentCollection', 'CollectionPost',
    'Message', 'WelcomeMessage',
    'SubscriptionPlan', 'UserSubscription', 'Tip', 'PPVPurchase', 'PaymentIntent',
    'RevenueRecord', 'Payout',
    'LiveStream',
    'CustomRequest',
    'ContentReport', 'AgeVerificationDocument',
    'Notification', 'UserActivity', 'ContentAnalytics',
]

from .models_user import Profile, CreatorProfile, Follow
from .models_content import Post, PostLike, PostComment, ContentCollection, CollectionPost
from .models_message import Message, WelcomeMessage
from .models_stream import LiveStream
from .models_request import CustomRequest
from .models_payment import (
    SubscriptionPlan, UserSubscription, Tip, PPVPurchase, PaymentIntent, RevenueRecord, Payout
)
from .models_moderation import ContentReport, AgeVerificationDocument
from .models_notification import Notification, UserActivity, ContentAnalytics
