# File: storefront/notifications/mailer.py
import smtplib, logging
from email.mime.text import MIMEText
from storefront.core.errors import NotificationError

logger = logging.getLogger(__name__)

class SmtpMailer:
    def __init__(self, host: str, port: int, username: str = "", password: str = "",
                 from_email: str = "", starttls: bool = True, timeout: int = 10):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email or username
        self.starttls = starttls
        self.timeout = timeout

    def send_html(self, to: str, subject: str, html: str) -> None:
        msg = MIMEText(html, "html", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as s:
                if self.starttls:
                    s.starttls()
                if self.username:
                    s.login(self.username, self.password)
                s.sendmail(self.from_email, [to], msg.as_string())
        except smtplib.SMTPException as e:
            logger.error(f"SMTP error sending to {to}: {e}")
            raise NotificationError(f"Failed to send email to {to}")
        except OSError as e:
            logger.error(f"Failed to send email to {to}: {e}")
            raise NotificationError(f"Failed to send email to {to}")

        logger.info(f"Email sent to {to}: {subject}")
