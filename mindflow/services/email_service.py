"""
Email Service for session notifications
"""
import smtplib
import logging
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from flask import current_app

logger = logging.getLogger(__name__)


def send_email(to_email, subject, body_text, body_html=None):
    """
    Generic email sending function

    Args:
        to_email: Recipient email
        subject: Email subject
        body_text: Plain text body
        body_html: HTML body (optional)

    Returns:
        bool: True if sent successfully, False if mail is not configured or delivery failed
    """
    try:
        mail_server = current_app.config.get('MAIL_SERVER')
        mail_port = current_app.config.get('MAIL_PORT')
        mail_use_tls = current_app.config.get('MAIL_USE_TLS')
        mail_username = current_app.config.get('MAIL_USERNAME')
        mail_password = current_app.config.get('MAIL_PASSWORD')
        mail_sender = current_app.config.get('MAIL_DEFAULT_SENDER')

        if not mail_username or not mail_password:
            logger.warning("Email not configured. Skipping email to %s", to_email)
            return False

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = mail_sender
        msg['To'] = to_email

        msg.attach(MIMEText(body_text, 'plain'))
        if body_html:
            msg.attach(MIMEText(body_html, 'html'))

        with smtplib.SMTP(mail_server, mail_port) as server:
            if mail_use_tls:
                server.starttls()
            server.login(mail_username, mail_password)
            server.sendmail(mail_sender, to_email, msg.as_string())

        logger.info(f"Email sent to {to_email}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


def send_session_reminder_email(email, recipient_name, counterpart_name, session):
    """
    Remind one participant about an upcoming session

    Args:
        email: Recipient address
        recipient_name: Name used in the greeting
        counterpart_name: The other participant
        session: Session record

    Returns:
        bool: True if email sent successfully
    """
    when = session.scheduled_date.strftime('%A %d %B %Y, %H:%M UTC')
    mode = session.mode.value
    join_hint = (
        "You can join the video room from your dashboard starting 15 minutes before the session."
        if mode == 'video' else f"This is a {mode} session."
    )

    text = f"""
Hello {recipient_name},

This is a reminder of your upcoming session with {counterpart_name}.

Session: {session.session_id}
When: {when}
Duration: {session.duration} minutes

{join_hint}

If you need to cancel, please do so from your dashboard.

Best regards,
MindFlow
    """

    html = f"""
<!DOCTYPE html>
<html>
<head>
    <style>
        body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
        .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
        .header {{ background: #7c3aed; color: white; padding: 20px; text-align: center; border-radius: 5px 5px 0 0; }}
        .content {{ background: #f9f9f9; padding: 30px; border: 1px solid #ddd; }}
        .details td:first-child {{ font-weight: bold; width: 100px; }}
        .footer {{ text-align: center; padding: 20px; color: #666; font-size: 12px; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>Session Reminder</h1>
        </div>
        <div class="content">
            <h2>Hello {recipient_name},</h2>
            <p>Your session with <strong>{counterpart_name}</strong> is coming up.</p>
            <table class="details">
                <tr><td>Session:</td><td>{session.session_id}</td></tr>
                <tr><td>When:</td><td>{when}</td></tr>
                <tr><td>Duration:</td><td>{session.duration} minutes</td></tr>
            </table>
            <p>{join_hint}</p>
        </div>
        <div class="footer">
            <p>MindFlow</p>
        </div>
    </div>
</body>
</html>
    """

    return send_email(email, 'Upcoming session reminder - MindFlow', text, html)
