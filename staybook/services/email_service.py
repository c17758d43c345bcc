"""
Email Service
Sends guest notifications for reservations and inquiries
"""

from flask import current_app
from flask_mail import Message
from extensions import mail


SUBJECTS = {
    'reservation': {
        'fr': 'Confirmation de réservation - {name}',
        'en': 'Booking Confirmation - {name}',
        'es': 'Confirmación de reserva - {name}',
    },
    'inquiry': {
        'fr': 'Demande reçue - {name}',
        'en': 'Request received - {name}',
        'es': 'Solicitud recibida - {name}',
    },
}


class EmailService:
    """Service for sending emails"""

    @staticmethod
    def send_email(to, subject, html_body, text_body=None):
        """Send an email; failures are logged and never raised"""
        try:
            msg = Message(
                subject=subject,
                recipients=[to] if isinstance(to, str) else to,
                html=html_body,
                body=text_body or html_body
            )
            mail.send(msg)
            return True
        except Exception as e:
            current_app.logger.error(f'Failed to send email: {str(e)}')
            return False

    @staticmethod
    def _subject(kind, language, name):
        templates = SUBJECTS[kind]
        return templates.get(language, templates['en']).format(name=name)

    @staticmethod
    def send_reservation_confirmation(reservation, property_obj):
        """Send reservation confirmation with the price breakdown to the guest"""
        name = property_obj.display_name(reservation.language)
        subject = EmailService._subject('reservation', reservation.language, name)

        discount_row = ''
        if reservation.discount_amount:
            discount_row = f"""
                    <p><strong>Discount ({reservation.coupon_code}):</strong> -{reservation.discount_amount} {reservation.currency}</p>"""

        html_body = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #2F6F5E;">Booking Confirmed!</h2>
                <p>Hi {reservation.guest_first_name},</p>
                <p>Your stay is confirmed.</p>

                <div style="background-color: #f8f8f8; padding: 20px; border-radius: 5px; margin: 20px 0;">
                    <h3 style="margin-top: 0; color: #333;">{name}</h3>
                    <p><strong>Check-in:</strong> {reservation.check_in}</p>
                    <p><strong>Check-out:</strong> {reservation.check_out}</p>
                    <p><strong>Nights:</strong> {reservation.nights}</p>
                    <p><strong>Guests:</strong> {reservation.guests}</p>
                    <p><strong>Subtotal:</strong> {reservation.subtotal} {reservation.currency}</p>
                    <p><strong>Cleaning fee:</strong> {reservation.cleaning_fee} {reservation.currency}</p>
                    <p><strong>Service fee:</strong> {reservation.service_fee} {reservation.currency}</p>
                    <p><strong>Taxes:</strong> {reservation.taxes} {reservation.currency}</p>{discount_row}
                    <p><strong>Total:</strong> {reservation.total} {reservation.currency}</p>
                    <p><strong>Confirmation code:</strong> {reservation.confirmation_code}</p>
                </div>

                <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
                <p style="color: #999; font-size: 12px;">
                    This is an automated message. Please do not reply to this email.
                </p>
            </div>
        </body>
        </html>
        """
        return EmailService.send_email(reservation.guest_email, subject, html_body)

    @staticmethod
    def send_inquiry_received(inquiry, property_obj):
        """Acknowledge a booking request"""
        name = property_obj.display_name(inquiry.language)
        subject = EmailService._subject('inquiry', inquiry.language, name)
        dates = ''
        if inquiry.check_in and inquiry.check_out:
            dates = f'<p><strong>Dates:</strong> {inquiry.check_in} - {inquiry.check_out}</p>'

        html_body = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #2F6F5E;">We received your request</h2>
                <p>Hi {inquiry.guest_first_name},</p>
                <p>The host will get back to you shortly.</p>
                <div style="background-color: #f8f8f8; padding: 20px; border-radius: 5px; margin: 20px 0;">
                    <h3 style="margin-top: 0; color: #333;">{name}</h3>
                    {dates}
                    <p><strong>Reference:</strong> #{inquiry.id}</p>
                </div>
            </div>
        </body>
        </html>
        """
        return EmailService.send_email(inquiry.guest_email, subject, html_body)
