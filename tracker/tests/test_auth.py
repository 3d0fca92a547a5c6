import time
import unittest

from jose import jwt

from tracker.auth import (
    AuthenticationError,
    authenticate,
    bearer_token,
    decode_token,
    hash_password,
    issue_token,
    public_profile,
    verify_password,
)
from tracker.config import Settings

USER = {
    "id": "admin",
    "username": "admin",
    "password": "admin",
    "name": "Administrator",
    "role": "admin",
}


class PasswordTests(unittest.TestCase):
    def test_hash_and_verify(self):
        stored = hash_password("s3cret")
        self.assertTrue(stored.startswith("scrypt$"))
        self.assertNotIn("s3cret", stored)
        self.assertTrue(verify_password("s3cret", stored))
        self.assertFalse(verify_password("wrong", stored))

    def test_hashes_are_salted(self):
        self.assertNotEqual(hash_password("same"), hash_password("same"))

    def test_legacy_plaintext_still_verifies(self):
        self.assertTrue(verify_password("admin", "admin"))
        self.assertFalse(verify_password("admin", "Admin"))

    def test_non_string_inputs_rejected(self):
        self.assertFalse(verify_password(None, "admin"))
        self.assertFalse(verify_password("admin", None))
        self.assertFalse(verify_password("admin", "scrypt$zz$zz"))

    def test_authenticate_requires_both_fields(self):
        users = [dict(USER, password=hash_password("admin"))]
        self.assertEqual(authenticate(users, "admin", "admin")["id"], "admin")
        self.assertIsNone(authenticate(users, "admin", "wrong"))
        self.assertIsNone(authenticate(users, "nobody", "admin"))
        self.assertIsNone(authenticate(users, None, None))

    def test_public_profile_omits_password(self):
        self.assertEqual(
            public_profile(USER),
            {"id": "admin", "username": "admin", "name": "Administrator", "role": "admin"},
        )


class TokenTests(unittest.TestCase):
    def setUp(self):
        self.settings = Settings(jwt_secret="test-secret")

    def test_token_carries_profile_and_one_hour_expiry(self):
        claims = decode_token(issue_token(USER, self.settings), self.settings)
        self.assertEqual(claims["id"], "admin")
        self.assertEqual(claims["username"], "admin")
        self.assertEqual(claims["name"], "Administrator")
        self.assertEqual(claims["role"], "admin")
        self.assertNotIn("password", claims)
        self.assertEqual(claims["exp"] - claims["iat"], 3600)

    def test_expired_token_rejected(self):
        token = jwt.encode(
            {"id": "admin", "exp": int(time.time()) - 10}, "test-secret", algorithm="HS256"
        )
        with self.assertRaises(AuthenticationError):
            decode_token(token, self.settings)

    def test_bad_signature_rejected(self):
        token = issue_token(USER, Settings(jwt_secret="other-secret"))
        with self.assertRaises(AuthenticationError):
            decode_token(token, self.settings)

    def test_missing_or_malformed_token_rejected(self):
        for token in (None, "", "not-a-token"):
            with self.assertRaises(AuthenticationError):
                decode_token(token, self.settings)

    def test_bearer_token_extraction(self):
        self.assertEqual(bearer_token("Bearer abc.def"), "abc.def")
        self.assertIsNone(bearer_token(None))
        self.assertIsNone(bearer_token("abc.def"))


if __name__ == "__main__":
    unittest.main()
