"""
Email service for sending couple invitations.
"""
import logging

from flask import current_app
from flask_mail import Message

from extensions import mail

logger = logging.getLogger(__name__)


def init_mail(app):
    """Initialize Flask-Mail with app configuration.

    Sending is suppressed when no SMTP account is configured.
    """
    if not app.config.get('MAIL_USERNAME'):
        app.config['MAIL_SUPPRESS_SEND'] = True

    mail.init_app(app)
    return mail


def build_invite_url(token):
    """Link the invitee opens to accept the invitation."""
    site_url = current_app.config.get('SITE_URL', 'http://localhost:3000').rstrip('/')
    return f"{site_url}/invite?token={token}"


def send_invitation_email(invitation, inviter):
    """
    Send an invitation email to join a couple.

    Args:
        invitation: Invitation model instance
        inviter: User model instance (who sent the invitation)

    Returns:
        bool: True if email sent successfully, False otherwise
    """
    invite_url = build_invite_url(invitation.token)
    inviter_name = inviter.name or inviter.email

    subject = f"{inviter_name} invited you to split expenses on SplitHalf"

    html_body = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; }}
        .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
        .header {{ background: #10b981; color: white; padding: 20px; border-radius: 8px 8px 0 0; }}
        .content {{ background: #f9fafb; padding: 30px; border: 1px solid #e5e7eb; }}
        .button {{ display: inline-block; background: #10b981; color: white !important; padding: 12px 24px; text-decoration: none; border-radius: 6px; font-weight: 600; margin: 20px 0; }}
        .footer {{ padding: 20px; font-size: 12px; color: #6b7280; text-align: center; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1 style="margin: 0;">SplitHalf</h1>
        </div>
        <div class="content">
            <h2>You're invited!</h2>
            <p><strong>{inviter_name}</strong> wants to track shared expenses with you on SplitHalf.</p>
            <a href="{invite_url}" class="button">Accept Invitation</a>
            <p>Or copy and paste this link into your browser:</p>
            <p style="word-break: break-all; color: #10b981;">{invite_url}</p>
            <p><strong>Note:</strong> This invitation expires in 7 days.</p>
        </div>
        <div class="footer">
            <p>If you didn't expect this invitation, you can safely ignore this email.</p>
        </div>
    </div>
</body>
</html>
"""

    text_body = f"""
{inviter_name} wants to track shared expenses with you on SplitHalf.

Click the link below to accept the invitation:
{invite_url}

Note: This invitation expires in 7 days.

If you didn't expect this invitation, you can safely ignore this email.
"""

    try:
        msg = Message(
            subject=subject,
            recipients=[invitation.invitee_email],
            body=text_body,
            html=html_body
        )

        if current_app.config.get('MAIL_SUPPRESS_SEND'):
            logger.info(f"[EMAIL SUPPRESSED] Would send invitation to {invitation.invitee_email}: {invite_url}")
            return True

        mail.send(msg)
        logger.info(f"Invitation email sent to {invitation.invitee_email}")
        return True

    except Exception:
        logger.exception(f"Failed to send invitation email to {invitation.invitee_email}")
        return False
