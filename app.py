import logging
import os

from dotenv import load_dotenv
from flask import Flask, redirect, render_template_string, request, session, url_for
from google_auth_oauthlib.flow import Flow
from google.oauth2.credentials import Credentials

from topicdeck.agents.deck_agent import get_blueprint


# ---- Flask app setup ----
load_dotenv()
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("topicdeck.app")

app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
app.config["DECK_DRY_RUN"] = os.environ.get("DECK_DRY_RUN", "").lower() in ("1", "true", "yes")
app.register_blueprint(get_blueprint())


# ---- OAuth configuration ----
CLIENT_SECRETS_FILE = os.environ.get("GOOGLE_CLIENT_SECRETS_FILE", "client_secret.json")

SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/presentations",
]

DEFAULT_PORT = int(os.environ.get("FLASK_PORT", "5000"))
DEFAULT_HOST = os.environ.get("FLASK_HOST", "127.0.0.1")
REDIRECT_URI = os.environ.get("GOOGLE_REDIRECT_URI", f"http://{DEFAULT_HOST}:{DEFAULT_PORT}/callback")


def credentials_to_dict(creds: Credentials) -> dict:
    return {
        "token": creds.token,
        "refresh_token": creds.refresh_token,
        "token_uri": creds.token_uri,
        "client_id": creds.client_id,
        "client_secret": creds.client_secret,
        "scopes": creds.scopes,
    }


def build_flow(redirect_uri: str | None = None):
    flow = Flow.from_client_secrets_file(CLIENT_SECRETS_FILE, scopes=SCOPES)
    flow.redirect_uri = redirect_uri or REDIRECT_URI
    return flow


# ---- Routes ----
@app.route("/")
def index():
    if "credentials" in session:
        html = """
        <h2>Welcome back</h2>
        <p>You are logged in.</p>
        <p>
            <a href="{{ url_for('deck.deck_page') }}">Generate a deck</a> |
            <a href="{{ url_for('logout') }}">Logout</a>
        </p>
        """
    else:
        html = """
        <h2>Welcome</h2>
        <p>You are not logged in.</p>
        <a href="{{ url_for('login') }}">Login with Google</a>
        """
    return render_template_string(html)


@app.route("/login")
def login():
    flow = build_flow(REDIRECT_URI)
    authorization_url, state = flow.authorization_url(
        access_type="offline",
        include_granted_scopes="true",
        prompt="consent",
    )
    session["state"] = state
    return redirect(authorization_url)


@app.route("/callback")
def oauth_callback():
    state_from_google = request.args.get("state")
    state_in_session = session.get("state")
    if not state_in_session or state_from_google != state_in_session:
        logger.warning("State mismatch. got=%s expected=%s", state_from_google, state_in_session)
        return "State mismatch. Please try logging in again.", 400

    flow = build_flow(REDIRECT_URI)
    flow.fetch_token(authorization_response=request.url)
    session["credentials"] = credentials_to_dict(flow.credentials)
    session.pop("state", None)
    return redirect(url_for("deck.deck_page"))


@app.route("/logout")
def logout():
    session.clear()
    return redirect(url_for("index"))


if __name__ == "__main__":
    os.environ["OAUTHLIB_INSECURE_TRANSPORT"] = "1"
    os.environ.setdefault("OAUTHLIB_RELAX_TOKEN_SCOPE", "1")
    app.run(host=DEFAULT_HOST, port=DEFAULT_PORT, debug=True)
