from concord.adapters import WerkzeugAuthenticator


def test_hash_and_verify():
    auth = WerkzeugAuthenticator()
    stored = auth.hash_password("secret")
    assert "secret" not in stored
    assert stored.startswith("pbkdf2:sha256")
    assert auth.verify("secret", stored)
    assert not auth.verify("Secret", stored)


def test_hashes_are_salted():
    auth = WerkzeugAuthenticator()
    assert auth.hash_password("secret") != auth.hash_password("secret")


def test_verify_rejects_malformed_values():
    auth = WerkzeugAuthenticator()
    assert not auth.verify("secret", "")
    assert not auth.verify("secret", "no-separator")
    assert not auth.verify("secret", "bogus:method$salt$digest")


def test_identity_store_uses_werkzeug_by_default(app):
    assert isinstance(app.identity.authenticator, WerkzeugAuthenticator)
    app.register("alice", "pw1")
    stored = app.store.user_by_name("alice").password_hash
    assert stored.startswith("pbkdf2:sha256")
