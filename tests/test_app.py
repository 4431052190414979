"""
Tests for the Streamlit view.

The app script runs headless through streamlit's AppTest against a
throwaway database.
"""

from pathlib import Path

import pytest
import streamlit as st
from streamlit.testing.v1 import AppTest


APP_PATH = str(Path(__file__).resolve().parent.parent / "app" / "main.py")


@pytest.fixture
def app(db_path, monkeypatch):
    monkeypatch.setenv("FINTRACK_DB_PATH", db_path)
    st.cache_resource.clear()
    yield AppTest.from_file(APP_PATH, default_timeout=30)
    st.cache_resource.clear()


def insert_user(client, user_id, email, password_hash):
    with client.connection() as conn:
        conn.execute(
            "INSERT INTO users (id, email, password_hash, name) VALUES (?, ?, ?, NULL)",
            (user_id, email, password_hash),
        )
        conn.commit()


def log_in(app, email, password):
    app.text_input(key="login_email").input(email)
    app.text_input(key="login_password").input(password)
    app.button(key="login_submit").click()
    app.run()


class TestLoginPage:
    """Tests for the login form."""

    def test_wrong_password_shows_message(self, app, client):
        """Test that a failed login is reported on the page."""
        app.run()
        log_in(app, "a@x.com", "wrong-pass")

        assert not app.exception
        assert [e.value for e in app.error] == ["Invalid email or password"]

    def test_storage_failure_shows_message(self, app, client, hasher):
        """Test that a broken user row is reported instead of crashing the page."""
        insert_user(client, 0, "a@x.com", hasher.hash("password1"))
        app.run()
        log_in(app, "a@x.com", "password1")

        assert not app.exception
        assert any("Could not log in" in e.value for e in app.error)
