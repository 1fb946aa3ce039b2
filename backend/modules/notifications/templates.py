"""Plain email templates, formatted with str.format."""

TEMPLATES = {
    "otp": {
        "subject": "Verify Your HouseHelp Account",
        "html": """
        <html>
        <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
            <h1 style="color: #4c66a4;">HOUSEHELP</h1>
            <p>Hello{greeting},</p>
            <p>Please use the following code to verify your account:</p>
            <p style="font-size: 32px; font-weight: bold; letter-spacing: 8px; text-align: center;">{code}</p>
            <p>This code will expire in 10 minutes.</p>
            <p style="color: #666; font-size: 14px;">If you didn't request this code, please ignore this email.</p>
        </body>
        </html>
        """,
        "text": "Your HouseHelp verification code is: {code}. This code will expire in 10 minutes.",
    },
    "password_reset": {
        "subject": "Reset Your HouseHelp Password",
        "html": """
        <html>
        <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
            <h1 style="color: #4c66a4;">Reset Your Password</h1>
            <p>Use the following code to reset your password:</p>
            <p style="font-size: 32px; font-weight: bold; letter-spacing: 8px; text-align: center;">{code}</p>
            <p>This code will expire in 15 minutes.</p>
            <p style="color: #666; font-size: 14px;">If you didn't request a reset, you can ignore this email.</p>
        </body>
        </html>
        """,
        "text": "Your HouseHelp password reset code is: {code}. This code will expire in 15 minutes.",
    },
    "verify_email": {
        "subject": "Verify Your Email - HouseHelp",
        "html": """
        <html>
        <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
            <h1 style="color: #4c66a4;">Verify Your Email</h1>
            <p>Please click the button below to verify your email address:</p>
            <p style="text-align: center; margin: 30px 0;">
                <a href="{url}" style="background: #4c66a4; color: white; padding: 12px 30px; text-decoration: none; border-radius: 8px;">Verify Email</a>
            </p>
            <p style="color: #666; font-size: 14px;">Or copy this link: {url}</p>
            <p style="color: #666; font-size: 14px;">This link will expire in 24 hours.</p>
        </body>
        </html>
        """,
        "text": "Verify your email by clicking this link: {url}",
    },
    "welcome": {
        "subject": "Welcome to HouseHelp!",
        "html": """
        <html>
        <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
            <h1 style="color: #4c66a4;">Welcome to HOUSEHELP!</h1>
            <p>Hello {name},</p>
            <p>Welcome to HouseHelp! We're excited to have you join our community of {audience}.</p>
        </body>
        </html>
        """,
        "text": "Hello {name}, welcome to HouseHelp!",
    },
}


def render(template: str, **values: str) -> tuple[str, str, str]:
    """Return (subject, html, text) for a named template."""
    entry = TEMPLATES[template]
    return (
        entry["subject"],
        entry["html"].format(**values),
        entry["text"].format(**values),
    )
