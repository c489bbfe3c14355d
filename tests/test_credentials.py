from datetime import datetime, timezone

import pytest
from jose import JWTError, jwt

from order_orchestrator.credentials import issue_service_token
from order_orchestrator.exceptions import ConfigurationError

SECRET = "s3cret"


def test_token_carries_service_claims():
    claims = jwt.decode(issue_service_token(SECRET), SECRET, algorithms=["HS256"], audience="orders-api")

    assert claims["sub"] == "lambda-orchestrator"
    assert claims["role"] == "service"
    assert claims["aud"] == "orders-api"


def test_token_expires_five_minutes_after_issuance():
    now = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
    claims = jwt.get_unverified_claims(issue_service_token(SECRET, now=now))

    assert claims["iat"] == int(now.timestamp())
    assert claims["exp"] - claims["iat"] == 300


def test_issue_is_a_pure_function_of_secret_and_time():
    now = datetime(2030, 1, 1, tzinfo=timezone.utc)
    assert issue_service_token(SECRET, now=now) == issue_service_token(SECRET, now=now)


def test_wrong_secret_is_rejected():
    with pytest.raises(JWTError):
        jwt.decode(issue_service_token(SECRET), "other", algorithms=["HS256"], audience="orders-api")


@pytest.mark.parametrize("secret", [None, "", "   ", 123])
def test_missing_or_malformed_secret_is_a_configuration_error(secret):
    with pytest.raises(ConfigurationError) as exc:
        issue_service_token(secret)
    assert exc.value.missing == ["JWT_SECRET"]
