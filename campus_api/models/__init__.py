# Database Models
from campus_api.models.activity_log import ActivityLog
from campus_api.models.base import Base, TimestampMixin
from campus_api.models.campus_news import CampusNews
from campus_api.models.marketplace import Product, SellerApplication, SellerProfile
from campus_api.models.message import Message
from campus_api.models.notification import Notification
from campus_api.models.poll import Poll, PollOption, PollVote
from campus_api.models.profile import Profile, ProfileRole
from campus_api.models.saved_item import SavedItem
from campus_api.models.sms import ScheduledSms, SmsTopup
from campus_api.models.subscription_payment import SubscriptionPayment
from campus_api.models.support_ticket import SupportTicket

__all__ = [
    "ActivityLog",
    "Base",
    "CampusNews",
    "Message",
    "Notification",
    "Poll",
    "PollOption",
    "PollVote",
    "Product",
    "Profile",
    "ProfileRole",
    "SavedItem",
    "ScheduledSms",
    "SellerApplication",
    "SellerProfile",
    "SmsTopup",
    "SubscriptionPayment",
    "SupportTicket",
    "TimestampMixin",
]
