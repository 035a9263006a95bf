"""
Email Service - transactional email over the Resend HTTP API.

Fired on:
- registration (welcome)
- password reset request
- new application (to the job poster)
- application status change (to the applicant)

Sending is fire-and-forget: send() logs failures and returns False,
it never raises. Callers never fail their own request because of email.
Routes schedule the template methods with BackgroundTasks so the blocking
HTTP call runs after the response, in the threadpool.
"""

import logging
from datetime import datetime
from functools import lru_cache
from html import escape

import requests

from jobportal.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class EmailService:
    """Thin wrapper around POST https://api.resend.com/emails."""

    def __init__(self, settings: Settings):
        self.api_key = settings.resend_api_key
        self.api_url = settings.resend_api_url
        self.sender = settings.email_from
        self.timeout = settings.email_timeout_seconds
        self.frontend_url = settings.frontend_url.rstrip("/")
        if not self.api_key:
            logger.warning("RESEND_API_KEY not set - emails will not be sent")

    def send(self, to: str, subject: str, html: str) -> bool:
        """Send one email. Returns True on success, False otherwise."""
        if not self.api_key:
            logger.error("Email to %s not sent - RESEND_API_KEY not configured", to)
            return False

        payload = {"from": self.sender, "to": [to], "subject": subject, "html": html}
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            r = requests.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
            if r.status_code >= 400:
                logger.error("Resend error %s for %s: %s", r.status_code, to, r.text[:500])
                return False
            logger.info("Email sent to %s (id=%s)", to, r.json().get("id"))
            return True
        except (requests.RequestException, ValueError):
            logger.exception("Email sending to %s failed", to)
            return False

    # ------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------

    def send_welcome(self, name: str, email: str, role: str) -> bool:
        body = f"""
            <h2>Hi {escape(name)}!</h2>
            <p>Your JobPortal account has been created successfully.</p>
            <ul>
              <li>Complete your profile to stand out</li>
              <li>Upload your resume</li>
              <li>Browse job opportunities</li>
              <li>Connect with alumni chapters</li>
            </ul>
            <p><a href="{self.frontend_url}/login">Get Started</a></p>
            <p><strong>Account Details:</strong><br>
               Email: {escape(email)}<br>
               Role: {role.replace('_', ' ').upper()}<br>
               Registration Date: {datetime.now():%B %d, %Y}</p>
        """
        return self.send(email, "Welcome to JobPortal - Account Created!", _layout("Welcome to JobPortal!", body))

    def send_password_reset(self, email: str, token: str, expires_at: datetime) -> bool:
        reset_url = f"{self.frontend_url}/reset-password?token={token}"
        body = f"""
            <h2>Reset Your Password</h2>
            <p>We received a request to reset your password. Click the link below to create a new one:</p>
            <p><a href="{reset_url}">Reset Password</a></p>
            <p><strong>Security Notice:</strong> this link expires at {expires_at:%H:%M} UTC.</p>
            <p>If you didn't request a password reset, ignore this email. Your password will remain unchanged.</p>
        """
        return self.send(email, "Password Reset Request - JobPortal", _layout("Password Reset", body))

    def send_new_application(self, poster_email: str, job_title: str, company: str) -> bool:
        body = f"""
            <h2>Great News!</h2>
            <p>A candidate has just applied for your job posting.</p>
            <p><strong>Position:</strong> {escape(job_title)}<br>
               <strong>Company:</strong> {escape(company)}<br>
               <strong>Application Time:</strong> {datetime.now():%b %d, %Y %H:%M}</p>
            <p><a href="{self.frontend_url}/applicants">View Application</a></p>
        """
        return self.send(poster_email, "New Application Received - JobPortal", _layout("New Application!", body))

    def send_status_update(self, email: str, name: str, job_title: str, status: str) -> bool:
        message = STATUS_MESSAGES.get(status, "Your application status has changed")
        body = f"""
            <h2>Dear {escape(name)},</h2>
            <p>{message} for the position: <strong>{escape(job_title)}</strong></p>
            <p>Status: <strong>{status.upper()}</strong></p>
            <p><a href="{self.frontend_url}/applications">View Details</a></p>
        """
        return self.send(email, f"Application Update - {job_title}", _layout("Application Status Update", body))


STATUS_MESSAGES = {
    "reviewed": "Your application has been reviewed",
    "shortlisted": "Congratulations! You have been shortlisted",
    "rejected": "Thank you for your application",
    "accepted": "Congratulations! Your application has been accepted",
}


def _layout(heading: str, body: str) -> str:
    return f"""
    <div style="font-family: 'Segoe UI', Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <div style="background: #667eea; padding: 30px; text-align: center;">
        <h1 style="color: white; margin: 0;">{heading}</h1>
      </div>
      <div style="background: white; padding: 30px;">{body}</div>
      <div style="text-align: center; padding: 20px; color: #9ca3af; font-size: 12px;">
        <p>&copy; {datetime.now().year} JobPortal. This is an automated message, please do not reply.</p>
      </div>
    </div>
    """


@lru_cache()
def get_email_service() -> EmailService:
    """Get or create the email service (singleton, also the FastAPI dependency)."""
    return EmailService(get_settings())
