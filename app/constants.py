import os

APP_DIR = os.path.dirname(os.path.abspath(__file__))
TEMPLATES_DIR = os.path.join(APP_DIR, 'templates')
DEFAULT_DATA_DIR = os.path.join(os.getcwd(), 'data')
DEFAULT_CONFIG_FILE = os.path.join(os.getcwd(), 'resource-hub.config.yaml')
CONFIG_PATH_ENV = 'RESOURCE_HUB_CONFIG_PATH'

BUILD_VERSION = '20261017_0900'

SESSION_COOKIE = 'sid'

# Password hashing (PBKDF2-HMAC)
PASSWORD_DIGEST = 'sha512'
PASSWORD_ITERATIONS = 120_000
PASSWORD_KEYLEN = 64
PASSWORD_SALT_BYTES = 16
MIN_PASSWORD_LENGTH_FLOOR = 8

# Seconds slept after a failed login or a wrong current password
LOGIN_FAILURE_DELAY = 0.15
LOGIN_RATE_LIMIT = '20 per minute'

SLUG_MAX_LENGTH = 64
FILENAME_MAX_LENGTH = 180
USER_AGENT_MAX_LENGTH = 512

YOUTUBE_THUMBNAIL_URL = 'https://img.youtube.com/vi/{video_id}/maxresdefault.jpg'

DEFAULT_SETTINGS = {
    "server": {
        "host": "0.0.0.0",
        "port": 3000,
    },
    "storage": {
        "data_dir": DEFAULT_DATA_DIR,
        "database_file": "downloads.db",
        "seed_demo_content": True,
    },
    "security": {
        "session_ttl_days": 7,
        "min_password_length": 12,
    },
    "admin": {
        "default_username": "creator",
        "default_password": "changeme",
    },
    "branding": {
        "site_name": "Dawson's Resource Hub",
        "meta_description": "Centralized download links for docker compose files from the channel.",
        "public": {
            "hero_title": "Download packs for every tutorial.",
            "hero_description": (
                "Every docker-compose, env template, and helper file from the channel in one place. "
                "Search, download, and plug the resources into any deployment workflow."
            ),
            "search_placeholder": "Search guides, tags, services...",
            "empty_state_message": "No download packs yet. Check back soon!",
            "card_cta_label": "Watch Tutorial →",
            "footer_text": "© {{year}} {{siteName}} • Crafted with Flask + SQLite",
        },
        "login": {
            "hero_title": "{{siteName}}",
            "hero_description": "Sign in to curate download packs and keep files in sync with every tutorial.",
            "default_credentials_heading": "First time setup",
            "default_credentials_helper": "Use default credentials to log in, then you'll set your own password.",
        },
        "admin": {
            "nav_label": "{{siteName}}",
            "hero_title": "Keep your download hub fresh.",
            "hero_description": "Update docker-compose files and resources the moment your videos drop.",
            "new_pack_title": "Add new video pack",
            "new_pack_description": "Paste the tutorial details, then attach inline snippets or external download links.",
        },
        "password": {
            "setup_title": "Set up your password",
            "setup_description": (
                "Welcome! Before you can manage resources, please set a secure password for your admin account."
            ),
            "change_title": "Change password",
            "change_description": "Use a strong password to protect the resource hub.",
            "helper_text": "Use a phrase you'll only use here.",
        },
    },
}

SEED_VIDEOS = [
    {
        "title": "Vaultwarden Self-Host Guide",
        "slug": "vaultwarden",
        "description": "Step-by-step deployment of Vaultwarden (Bitwarden) with Docker Compose.",
        "video_url": "https://youtu.be/vaultwarden-demo",
        "thumbnail_url": "https://images.unsplash.com/photo-1520607162513-77705c0f0d4a?w=800",
        "tags": ["passwords", "security", "docker"],
        "assets": [
            {"label": "docker-compose.yml", "url": "https://example.com/vaultwarden/docker-compose.yml"},
            {"label": ".env sample", "url": "https://example.com/vaultwarden/.env"},
        ],
    },
    {
        "title": "Nginx Proxy Manager Setup",
        "slug": "npm",
        "description": "Reverse proxy everything on your homelab in under 15 minutes.",
        "video_url": "https://youtu.be/nginx-proxy-demo",
        "thumbnail_url": "https://images.unsplash.com/photo-1518770660439-4636190af475?w=800",
        "tags": ["reverse-proxy", "ssl", "docker"],
        "assets": [
            {"label": "docker-compose.yml", "url": "https://example.com/nginxproxymanager/docker-compose.yml"},
            {"label": "acl.conf", "url": "https://example.com/nginxproxymanager/acl.conf"},
        ],
    },
    {
        "title": "Jellyfin Media Server",
        "slug": "jellyfin",
        "description": "Host your own streaming service powered by Jellyfin.",
        "video_url": "https://youtu.be/jellyfin-demo",
        "thumbnail_url": "https://images.unsplash.com/photo-1489515217757-5fd1be406fef?w=800",
        "tags": ["media", "docker", "streaming"],
        "assets": [
            {"label": "docker-compose.yml", "url": "https://example.com/jellyfin/docker-compose.yml"},
            {"label": "traefik.yml", "url": "https://example.com/jellyfin/traefik.yml"},
        ],
    },
]

MIME_TYPES = {
    'yml': 'text/yaml; charset=utf-8',
    'yaml': 'text/yaml; charset=utf-8',
    'json': 'application/json; charset=utf-8',
    'env': 'text/plain; charset=utf-8',
    'txt': 'text/plain; charset=utf-8',
    'sh': 'text/x-shellscript; charset=utf-8',
    'ts': 'application/typescript; charset=utf-8',
    'tsx': 'application/typescript; charset=utf-8',
    'js': 'application/javascript; charset=utf-8',
    'jsx': 'application/javascript; charset=utf-8',
    'md': 'text/markdown; charset=utf-8',
    'mdx': 'text/markdown; charset=utf-8',
    'conf': 'text/plain; charset=utf-8',
    'ini': 'text/plain; charset=utf-8',
}
DEFAULT_MIME_TYPE = 'text/plain; charset=utf-8'
