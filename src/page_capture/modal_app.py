"""
Modal cloud deployment for Page Capture.

Serves the FastAPI app (see page_capture.web) from a container with
Chromium installed. Set CAPTURE_BROWSER_ENDPOINT in the `page-capture`
secret to drive a remote browser instead of the bundled one.
"""

import modal

app = modal.App("page-capture")

# Image with Chromium for Pyppeteer
image = (
    modal.Image.debian_slim(python_version="3.12")
    .apt_install(
        "chromium",
        "libnss3",
        "libatk1.0-0",
        "libatk-bridge2.0-0",
        "libcups2",
        "libdrm2",
        "libxkbcommon0",
        "libxcomposite1",
        "libxdamage1",
        "libxfixes3",
        "libxrandr2",
        "libgbm1",
        "libasound2",
        "libpango-1.0-0",
        "libcairo2",
        "fonts-liberation",
    )
    .pip_install("pyppeteer>=1.0.0")
    .env(
        {
            "PYPPETEER_CHROMIUM_EXECUTABLE": "/usr/bin/chromium",
            "PYPPETEER_HOME": "/tmp/pyppeteer",
        }
    )
    .pip_install(
        "fastapi>=0.109.0",
        "aiohttp>=3.9",
    )
    .add_local_python_source("page_capture")
)


@app.function(
    image=image,
    secrets=[modal.Secret.from_name("page-capture")],
    timeout=120,
    memory=2048,
    cpu=2.0,
)
@modal.concurrent(max_inputs=8)
@modal.asgi_app()
def fastapi_app():
    """FastAPI app for the Page Capture API."""
    from page_capture.config import Settings
    from page_capture.web import create_app

    settings = Settings.from_env()
    print(
        f"[API] Starting: endpoint={settings.browser_endpoint or 'local chromium'}, "
        f"cache_ttl={settings.cache_ttl}s, selectors={list(settings.selectors)}",
        flush=True,
    )
    return create_app(settings)
