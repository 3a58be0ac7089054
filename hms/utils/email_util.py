# /hms/utils/email_util.py
import os
import smtplib
import ssl
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from flask import current_app
from markupsafe import escape


def send_credentials_email(recipient_email: str, name: str, password: str):
    """
    Sends a newly registered patient the temporary password for their account.

    Args:
        recipient_email (str): The email the account was registered with.
        name (str): The patient's display name.
        password (str): The generated temporary password.

    Returns:
        bool: True when the message was handed to the mail server.
    """
    mail_server = os.environ.get('MAIL_SERVER')
    mail_port = int(os.environ.get('MAIL_PORT', 587))
    mail_username = os.environ.get('MAIL_USERNAME')
    mail_password = os.environ.get('MAIL_PASSWORD')

    if not all([mail_server, mail_username, mail_password]):
        current_app.logger.error("Email server is not configured. Cannot send credentials email.")
        return False

    sender_email = mail_username

    message = MIMEMultipart("alternative")
    message["Subject"] = "Your Hospital Portal Account"
    message["From"] = sender_email
    message["To"] = recipient_email

    text = f"""
    Hello {name},

    An account has been created for you on the hospital patient portal.
    Sign in with: {recipient_email}
    Your temporary password is: {password}

    Please sign in and change your password.
    """

    html = f"""
    <html>
      <body>
        <h2>Welcome to the Hospital Portal</h2>
        <p>Hello {escape(name)},</p>
        <p>An account has been created for you. Use the following credentials to sign in:</p>
        <ul>
          <li><strong>Email:</strong> {escape(recipient_email)}</li>
          <li><strong>Temporary Password:</strong> <code>{escape(password)}</code></li>
        </ul>
        <p>Please change this password after your first sign-in.</p>
      </body>
    </html>
    """

    message.attach(MIMEText(text, "plain"))
    message.attach(MIMEText(html, "html"))

    try:
        context = ssl.create_default_context()
        with smtplib.SMTP(mail_server, mail_port) as server:
            server.starttls(context=context)
            server.login(mail_username, mail_password)
            server.sendmail(sender_email, recipient_email, message.as_string())
        current_app.logger.info(f"Sent account credentials email to {recipient_email}")
        return True
    except (smtplib.SMTPException, OSError) as e:
        current_app.logger.error(f"Failed to send email to {recipient_email}: {e}")
        return False
