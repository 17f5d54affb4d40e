"""
Unit tests for verification answer classification.
"""

import pytest

from otpflow.schemas.otp import Role, VerifyResponse
from otpflow.schemas.verification import VerificationStatus
from otpflow.services.classification import classify_response, structured_status


@pytest.mark.parametrize(
    "message, token, role, expected",
    [
        ("Email verified successfully", "t1", Role.USER, VerificationStatus.SUCCESS),
        ("EMAIL VERIFIED", "t1", Role.VENDOR, VerificationStatus.SUCCESS),
        ("Success", None, Role.USER, VerificationStatus.VERIFIED_WITHOUT_TOKEN),
        ("Invalid code", None, Role.USER, VerificationStatus.FAILED),
        ("Invalid code", None, Role.VENDOR, VerificationStatus.FAILED),
        ("", None, Role.USER, VerificationStatus.FAILED),
        ("Logged in", "t1", Role.USER, VerificationStatus.SUCCESS),
        ("Vendor verified, awaiting admin approval", "t1", Role.VENDOR, VerificationStatus.PENDING_APPROVAL),
        ("Vendor verified, AWAITING admin approval", None, Role.VENDOR, VerificationStatus.PENDING_APPROVAL),
        ("Vendor verified, awaiting admin approval", "t1", Role.USER, VerificationStatus.SUCCESS),
        # Not a success message and no token: the failure rule comes first
        ("Awaiting approval", None, Role.VENDOR, VerificationStatus.FAILED),
    ],
)
def test_free_text_classification(message, token, role, expected):
    response = VerifyResponse(message=message, token=token)
    assert classify_response(response, role) is expected


class TestStructuredStatus:
    """A declared status field takes precedence over the message text"""

    def test_declared_failure_wins_over_token(self):
        response = VerifyResponse(message="verified", token="t1", status="FAILED")
        assert classify_response(response, Role.USER) is VerificationStatus.FAILED

    def test_declared_pending_for_vendor(self):
        response = VerifyResponse(message="Thanks!", token="t1", status="pending_approval")
        assert classify_response(response, Role.VENDOR) is VerificationStatus.PENDING_APPROVAL

    def test_declared_pending_for_user_logs_in(self):
        response = VerifyResponse(message="Thanks!", token="t1", status="PENDING_APPROVAL")
        assert classify_response(response, Role.USER) is VerificationStatus.SUCCESS

    def test_declared_success_without_token(self):
        response = VerifyResponse(message="Invalid code", status="SUCCESS")
        assert classify_response(response, Role.USER) is VerificationStatus.VERIFIED_WITHOUT_TOKEN

    def test_unknown_status_falls_back_to_message(self):
        response = VerifyResponse(message="Invalid code", status="MAYBE")
        assert structured_status(response) is None
        assert classify_response(response, Role.USER) is VerificationStatus.FAILED

    def test_custom_status_field(self):
        response = VerifyResponse(message="Invalid code", token="t1", outcome="FAILED")
        assert classify_response(response, Role.USER) is VerificationStatus.SUCCESS
        assert classify_response(response, Role.USER, status_field="outcome") is VerificationStatus.FAILED
