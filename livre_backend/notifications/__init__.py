from .mailer import EmailNotificationService, SmtpSettings, get_email_notification_service

__all__ = ["EmailNotificationService", "SmtpSettings", "get_email_notification_service"]
