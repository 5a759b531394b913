#!/usr/bin/env python3
"""Push a verification email through the same dispatch path signup uses.

Usage, from the project root:
  python scripts/test_verification_email.py someone@gmail.com [--code 12345]

Delivery failures show up as [Mailgun] / [CRITICAL_EMAIL_FAILURE] log lines.
"""
import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def main():
    parser = argparse.ArgumentParser(description="Send a Vivimap verification email.")
    parser.add_argument("email")
    parser.add_argument("--code", help="5-digit code to send (random if omitted)")
    args = parser.parse_args()

    from app.config import get_settings
    from app.services.notifications import dispatch_verification_email, mailgun_configured
    from app.services.validation import normalize_email, validate_verification_code
    from app.services.verification import generate_verification_code

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = get_settings()
    if not mailgun_configured(settings):
        print("Mailgun is not configured: set MAILGUN_API_KEY and MAILGUN_DOMAIN in .env")
        return 1

    code = args.code or generate_verification_code()
    error = validate_verification_code(code)
    if error:
        print(error)
        return 2

    to_email = normalize_email(args.email)
    print(f"Dispatching code {code} to {to_email} via {settings.mailgun_domain}")
    dispatch_verification_email(to_email, code, settings, "manual")
    return 0


if __name__ == "__main__":
    sys.exit(main())
