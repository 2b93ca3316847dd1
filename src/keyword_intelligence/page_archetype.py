"""
Ranking page and site brand detection.

Infers what kind of page a keyword ranks on from its URL path:
- Product: homepage, tools, calculators, pricing, plans, signup, demos,
  product/feature/solution pages (conversion-focused)
- Blog: blog posts, guides, FAQs, how-tos, learning resources (educational)

Blog patterns win: a URL matching both is a blog page. This keeps
"/blog/pricing-explained" from being treated as a pricing page.

Also extracts the site's own brand token from its Search Console property.
"""

import logging
import re
from typing import Literal, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

PageKind = Literal["product", "blog"]

BLOG_PATH_PATTERN = re.compile(
    r'(?:^|/)(blog|blogs|guides?|faqs?|how-to|learn|resources?|articles?)(?:[/.-]|$)'
)

PRODUCT_PATH_PATTERN = re.compile(
    r'(?:^|/)(calculators?|tools?|pricing|plans|signup|sign-up|demo|products?'
    r'|features|solutions)(?:[/.-]|$)'
)

# Second-level labels that sit between the brand and a country TLD
_SECOND_LEVEL_SUFFIXES = {"co", "com", "org", "net", "ac", "gov", "edu"}


def _url_path(url: str) -> Optional[str]:
    """Extract a lowercased path from a full URL or bare path."""
    try:
        parsed = urlparse(url.strip())
    except ValueError as e:
        logger.debug(f"Could not parse ranking URL {url!r}: {e}")
        return None

    if parsed.scheme or parsed.netloc:
        return parsed.path.lower()

    # Bare "example.com/blog/x" has no scheme; drop the host part
    path = parsed.path
    if path and not path.startswith("/") and "/" in path and "." in path.split("/", 1)[0]:
        path = "/" + path.split("/", 1)[1]
    elif path and not path.startswith("/") and "." in path:
        path = "/"
    return path.lower()


def detect_url_page_kind(url: Optional[str]) -> Optional[PageKind]:
    """
    Classify a ranking URL as a product page or a blog page.

    Args:
        url: Full URL or path of the page the keyword ranks on.

    Returns:
        "blog", "product", or None if the URL matches neither.
    """
    if not url or not url.strip():
        return None

    path = _url_path(url)
    if path is None:
        return None

    if BLOG_PATH_PATTERN.search(path):
        return "blog"

    if path in ("", "/") or PRODUCT_PATH_PATTERN.search(path):
        return "product"

    return None


def extract_brand_token(site_url: Optional[str]) -> Optional[str]:
    """
    Extract the site's brand token from its URL or Search Console property.

    "https://www.acme.com/" -> "acme"
    "sc-domain:acme.co.uk" -> "acme"

    Args:
        site_url: Site URL or "sc-domain:" property.

    Returns:
        Lowercased brand token, or None if nothing usable remains.
    """
    if not site_url or not site_url.strip():
        return None

    value = site_url.strip().lower()
    if value.startswith("sc-domain:"):
        value = value[len("sc-domain:"):]

    if "://" not in value:
        value = "http://" + value

    try:
        host = urlparse(value).hostname or ""
    except ValueError as e:
        logger.debug(f"Could not parse site URL {site_url!r}: {e}")
        return None

    if host.startswith("www."):
        host = host[4:]

    labels = [label for label in host.split(".") if label]
    if len(labels) < 2:
        return labels[0] if labels and len(labels[0]) > 1 else None

    # Drop the TLD, then a second-level suffix like the "co" in co.uk
    labels = labels[:-1]
    if len(labels) > 1 and labels[-1] in _SECOND_LEVEL_SUFFIXES:
        labels = labels[:-1]

    brand = labels[-1]
    return brand if len(brand) > 1 else None
