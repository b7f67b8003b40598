# taste_trail/domains/notifications/templates.py
"""Title / message templates per notification type."""
from dataclasses import dataclass
from typing import Dict, Mapping, Tuple


class _Blank(dict):
    def __missing__(self, key):
        return ""


@dataclass(frozen=True)
class NotificationTemplate:
    title: str
    message: str

    def render(self, data: Mapping) -> Tuple[str, str]:
        values = _Blank(data or {})
        return (
            self.title.format_map(values).strip(),
            " ".join(self.message.format_map(values).split()),
        )


TEMPLATES: Dict[str, NotificationTemplate] = {
    "like": NotificationTemplate(
        "New like", "{liker_name} liked your review of {restaurant_name}"
    ),
    "comment": NotificationTemplate(
        "New comment", "{commenter_name} commented on your review of {restaurant_name}"
    ),
    "reply": NotificationTemplate(
        "New reply", "{commenter_name} replied to your comment"
    ),
    "new_review": NotificationTemplate(
        "New review", "{reviewer_name} left a {rating}-star review for {restaurant_name}"
    ),
    "owner_response": NotificationTemplate(
        "Owner response", "The owner of {restaurant_name} responded to your review"
    ),
    "follow": NotificationTemplate(
        "New follower", "{follower_name} started following you"
    ),
    "influencer_approved": NotificationTemplate(
        "Influencer application approved",
        "Congratulations! You are now a verified influencer on Taste Trail",
    ),
    "influencer_rejected": NotificationTemplate(
        "Influencer application update",
        "Your influencer application was not approved. {notes}",
    ),
    "influencer_application_received": NotificationTemplate(
        "New influencer application", "{applicant_name} applied for influencer status"
    ),
    "moderation_action": NotificationTemplate(
        "Moderation notice", "A moderation action was taken on your account: {action}. Reason: {reason}"
    ),
    "moderation_warning": NotificationTemplate(
        "Warning", "You received a warning from the moderators. Reason: {reason}"
    ),
    "moderation_ban": NotificationTemplate(
        "Account suspended", "Your account was suspended. Reason: {reason}"
    ),
    "report_submitted": NotificationTemplate(
        "New report", "A {report_type} was reported for {reason}"
    ),
    "report_resolved": NotificationTemplate(
        "Report update", "Your report was {outcome}. Thank you for helping keep Taste Trail safe"
    ),
    "restaurant_claim_received": NotificationTemplate(
        "New restaurant claim", "{claimant_name} submitted a claim for {restaurant_name}"
    ),
    "restaurant_claim_dispute": NotificationTemplate(
        "Ownership dispute", "{claimant_name} has disputed your ownership of {restaurant_name}"
    ),
    "restaurant_claim_dispute_admin": NotificationTemplate(
        "Disputed restaurant claim", "{claimant_name} disputes the current ownership of {restaurant_name}"
    ),
    "restaurant_claim_approved": NotificationTemplate(
        "Claim approved", "Your claim for {restaurant_name} was approved. You can now manage it"
    ),
    "restaurant_claim_rejected": NotificationTemplate(
        "Claim rejected", "Your claim for {restaurant_name} was rejected. {notes}"
    ),
    "system_announcement": NotificationTemplate("{title}", "{message}"),
    "welcome": NotificationTemplate(
        "Welcome to Taste Trail!", "Hi {name}, start discovering and reviewing great restaurants"
    ),
}


def render(notification_type: str, data: Mapping) -> Tuple[str, str]:
    try:
        template = TEMPLATES[notification_type]
    except KeyError:
        raise ValueError(f"Unknown notification type: {notification_type}")
    return template.render(data)
