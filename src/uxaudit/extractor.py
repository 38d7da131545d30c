"""Static page extraction: HTML in, SignalSnapshot and audit payload out.

Signals are read from markup and inline CSS only. Geometry that needs a
rendered page (dominance ratios, reading alignment) falls back to neutral
values so the analyzers neither reward nor punish what was not measured.
"""

import json
import logging
import re
from typing import Iterable, List, Optional

import httpx
from bs4 import BeautifulSoup, Tag

from uxaudit.constants import (
    DEFAULT_VIEWPORT_HEIGHT,
    MAX_BUTTONS,
    MAX_FORMS,
    MAX_HEADINGS,
    MAX_MAIN_TEXT_LENGTH,
)
from uxaudit.exceptions import ExtractionError
from uxaudit.models import (
    AccessibilitySignals,
    ExtractedPage,
    MotionSignals,
    SeoSignals,
    SignalSnapshot,
    UXSignals,
    VisualAssets,
)
from uxaudit.utils import unique

logger = logging.getLogger(__name__)

EMPTY_MARKER = "None"
NEUTRAL_RATIO = 0.5
LONG_ANIMATION_SECONDS = 5.0

# Copy patterns
CTA_LABEL = re.compile(r"start|get|try|book|buy|sign up|signup|contact|learn|demo")
VAGUE_CTA = re.compile(r"^(click here|learn more|read more|more|submit|go|continue|details|here)$")
BENEFIT_CTA = re.compile(r"\b(free|save|grow|boost|improve|discover|unlock|increase|get started)\b")
URGENCY_CTA = re.compile(r"\b(now|today|instant|instantly|limited|fast|quick)\b")
VALUE_PROP = re.compile(
    r"\b(help|helps|save|saves|grow|without|faster|easier|simple|better|all-in-one)\b",
    re.IGNORECASE,
)

# Trust patterns
TESTIMONIAL = re.compile(r"testimonial|what (?:our )?(?:customers|clients) say", re.IGNORECASE)
SOCIAL_PROOF = re.compile(
    r"trusted by|loved by|\d[\d,.]*\+?\s*(?:k\s+)?(?:customers|users|businesses|teams|companies)",
    re.IGNORECASE,
)
TRUST_BADGE = re.compile(
    r"\b(secure checkout|ssl|money-back|guarantee|certified|verified|gdpr|soc ?2|pci)\b",
    re.IGNORECASE,
)
ABOUT_OR_CONTACT = re.compile(r"\b(about|contact)\b", re.IGNORECASE)

# Markup patterns
BUTTON_CLASS = re.compile(r"\b(btn|button|cta)\b", re.IGNORECASE)
PRIMARY_CLASS = re.compile(r"(primary|\bcta\b|btn-main|button--main)", re.IGNORECASE)
PROGRESS_CLASS = re.compile(r"(progress|stepper|step-indicator|steps)", re.IGNORECASE)
HAMBURGER = re.compile(r"(hamburger|menu-toggle|navbar-toggler|nav-toggle)", re.IGNORECASE)
CAROUSEL_CLASS = re.compile(r"(carousel|slider|swiper|slick|glide)", re.IGNORECASE)
REVEAL_CLASS = re.compile(r"\b(reveal|aos-\w+|wow|fade-in|animate-on-scroll)\b", re.IGNORECASE)
PAUSE_CONTROL = re.compile(r"\b(pause|stop animation|stop slideshow)\b", re.IGNORECASE)

# CSS patterns
CSS_ANIMATION = re.compile(r"\banimation(?:-name)?\s*:\s*(?!none\b)", re.IGNORECASE)
CSS_TRANSITION = re.compile(r"\btransition(?:-property)?\s*:\s*(?!none\b)", re.IGNORECASE)
CSS_ANIMATION_VALUE = re.compile(r"\banimation(?:-duration)?\s*:([^;}]*)", re.IGNORECASE)
CSS_TIME = re.compile(r"(\d*\.?\d+)(ms|s)\b", re.IGNORECASE)
CSS_INFINITE = re.compile(r"\binfinite\b", re.IGNORECASE)
JS_ANIMATION_LIBRARIES = re.compile(
    r"(gsap|anime(?:\.min)?\.js|requestAnimationFrame|framer-motion|scrollreveal|velocity(?:\.min)?\.js|aos(?:\.min)?\.js)",
    re.IGNORECASE,
)

FIELD_TAGS = ["input", "textarea", "select"]
NON_FIELD_INPUT_TYPES = {"hidden", "submit", "button", "image", "reset"}


def _text(node: Optional[Tag]) -> str:
    if node is None:
        return ""
    return " ".join(node.get_text(" ", strip=True).split())


def _classes(node: Tag) -> str:
    return " ".join(node.get("class") or [])


def _is_field(node: Tag) -> bool:
    if node.name != "input":
        return True
    return (node.get("type") or "text").lower() not in NON_FIELD_INPUT_TYPES


def _button_label(node: Tag) -> str:
    if node.name == "input":
        return (node.get("value") or "").strip()
    return _text(node) or (node.get("aria-label") or "").strip()


def _join(items: Iterable[str]) -> str:
    return " || ".join(items) or EMPTY_MARKER


def _compact_json(data: dict) -> str:
    return json.dumps(data, separators=(",", ":"))


def build_payload(url: str, snapshot: SignalSnapshot) -> str:
    """Flatten a snapshot into the plain-text body the model and the fallback read.

    Args:
        url: Page URL
        snapshot: Extracted signals

    Returns:
        Payload with `KEY: value` sections separated by blank lines
    """
    accessibility = snapshot.accessibility.to_dict()
    seo = snapshot.seo.to_dict()
    return "\n\n".join([
        f"URL: {url}",
        f"TITLE: {snapshot.title}",
        f"HEADINGS: {_join(snapshot.headings)}",
        f"BUTTONS: {_join(snapshot.buttons)}",
        f"FORMS: {_join(snapshot.forms)}",
        f"MAIN_TEXT: {snapshot.main_text or EMPTY_MARKER}",
        f"A11Y_BASELINE: {_compact_json(accessibility)}",
        f"SEO_BASELINE: {_compact_json(seo)}",
    ])


class PageExtractor:
    """Extracts a SignalSnapshot from static HTML."""

    def extract(self, url: str, html: str) -> ExtractedPage:
        """Extract signals and build the payload for one page.

        Args:
            url: Page URL
            html: Raw HTML

        Returns:
            ExtractedPage (no screenshots; visual references stay empty)

        Raises:
            ExtractionError: The HTML could not be parsed into a page
        """
        if not html or not html.strip():
            raise ExtractionError(f"No HTML content received for {url}")

        try:
            soup = BeautifulSoup(html, "html.parser")
            snapshot = self.snapshot(soup)
        except (ValueError, TypeError, AttributeError) as e:
            raise ExtractionError(f"Failed to extract {url}: {e}") from e

        logger.info(
            f"extract.success url={url} headings={len(snapshot.headings)} "
            f"buttons={len(snapshot.buttons)} forms={len(snapshot.forms)} "
            f"main_text_chars={len(snapshot.main_text)}"
        )
        return ExtractedPage(
            url=url,
            snapshot=snapshot,
            payload=build_payload(url, snapshot),
            visual=VisualAssets(),
        )

    def snapshot(self, soup: BeautifulSoup) -> SignalSnapshot:
        """Build the SignalSnapshot from a parsed document."""
        # Motion signals read <style> and <script>, which are removed before text extraction
        css = self._collect_css(soup)
        motion = self._motion_signals(soup, css)
        hover_signals = len(re.findall(r":hover\b", css))
        focus_signals = len(re.findall(r":focus(?:-visible|-within)?\b", css))

        for node in soup.find_all(["script", "style", "noscript", "template"]):
            node.decompose()

        title = _text(soup.title) or "Untitled"
        meta = soup.find("meta", attrs={"name": "description"})
        meta_description = (meta.get("content") or "").strip() if meta else ""

        headings = unique(_text(h) for h in soup.find_all(["h1", "h2", "h3"]))[:MAX_HEADINGS]
        buttons = unique(
            _button_label(node)
            for node in soup.select("button, a[role='button'], input[type='submit']")
        )[:MAX_BUTTONS]
        forms = unique(self._describe_form(form) for form in soup.find_all("form"))[:MAX_FORMS]

        main_node = soup.find("main") or soup.body or soup
        main_text = _text(main_node)[:MAX_MAIN_TEXT_LENGTH]

        cta_count = sum(
            1 for node in soup.find_all(["a", "button"])
            if CTA_LABEL.search(_text(node).lower())
        )

        return SignalSnapshot(
            title=title,
            headings=tuple(headings),
            buttons=tuple(buttons),
            forms=tuple(forms),
            main_text=main_text,
            meta_description=meta_description,
            accessibility=self._accessibility_signals(soup),
            seo=SeoSignals(
                title_length=len(title),
                has_meta_description=bool(meta_description),
                h1_count=len(soup.find_all("h1")),
                cta_count=cta_count,
            ),
            motion=motion,
            ux=self._ux_signals(soup, buttons, hover_signals, focus_signals),
        )

    # ------------------------------------------------------------------
    # Accessibility
    # ------------------------------------------------------------------

    def _accessibility_signals(self, soup: BeautifulSoup) -> AccessibilitySignals:
        missing_alt = sum(1 for img in soup.find_all("img") if not (img.get("alt") or "").strip())

        unlabeled = 0
        for node in soup.find_all(FIELD_TAGS):
            if not _is_field(node):
                continue
            if (node.get("aria-label") or "").strip():
                continue
            if node.get("id") and soup.find("label", attrs={"for": node["id"]}):
                continue
            if node.find_parent("label"):
                continue
            unlabeled += 1

        heading_order_issue = False
        previous_level = 0
        for heading in soup.find_all(re.compile(r"^h[1-6]$")):
            level = int(heading.name[1])
            if previous_level and level - previous_level > 1:
                heading_order_issue = True
                break
            previous_level = level

        return AccessibilitySignals(
            missing_alt_count=missing_alt,
            unlabeled_input_count=unlabeled,
            heading_order_issue=heading_order_issue,
        )

    def _describe_form(self, form: Tag) -> str:
        labels = [_text(label) for label in form.find_all("label")]
        fields = [
            (node.get("name") or node.get("id") or node.get("placeholder")
             or node.get("aria-label") or "").strip()
            for node in form.find_all(FIELD_TAGS)
        ]
        return " | ".join(item for item in labels + fields if item).strip()

    # ------------------------------------------------------------------
    # Motion
    # ------------------------------------------------------------------

    def _collect_css(self, soup: BeautifulSoup) -> str:
        blocks = [style.get_text() for style in soup.find_all("style")]
        blocks.extend(node["style"] for node in soup.find_all(style=True))
        return "\n".join(blocks)

    def _motion_signals(self, soup: BeautifulSoup, css: str) -> MotionSignals:
        long_durations = 0
        for match in CSS_ANIMATION_VALUE.finditer(css):
            for amount, unit in CSS_TIME.findall(match.group(1)):
                seconds = float(amount) / 1000 if unit.lower() == "ms" else float(amount)
                if seconds >= LONG_ANIMATION_SECONDS:
                    long_durations += 1
                    break

        scripts = " ".join(
            (script.get("src") or "") + " " + script.get_text()
            for script in soup.find_all("script")
        )
        js_hooks = len({m.lower() for m in JS_ANIMATION_LIBRARIES.findall(scripts)})

        scroll_reveal = len(soup.find_all(
            lambda tag: tag.has_attr("data-aos")
            or tag.has_attr("data-scroll")
            or bool(REVEAL_CLASS.search(_classes(tag)))
        ))
        carousels = len(soup.find_all(self._is_auto_carousel))
        lottie = len(soup.find_all(
            lambda tag: tag.name in ("lottie-player", "dotlottie-player")
            or tag.has_attr("data-animation-path")
            or tag.has_attr("data-lottie")
        ))
        autoplay_videos = [video for video in soup.find_all("video") if video.has_attr("autoplay")]
        gifs = [
            img for img in soup.find_all("img")
            if (img.get("src") or "").lower().split("?")[0].endswith(".gif")
        ]

        infinite = len(CSS_INFINITE.findall(css))
        reduced_motion = "prefers-reduced-motion" in css
        pause_control = any(
            PAUSE_CONTROL.search(_text(node) or (node.get("aria-label") or ""))
            for node in soup.find_all(["button", "a"])
        )

        hero = self._hero(soup)
        lcp_animated = bool(hero and (
            hero.find("video", autoplay=True)
            or hero.find(["lottie-player", "dotlottie-player"])
            or any(gif in hero.find_all("img") for gif in gifs)
        ))

        risks = []
        if carousels and not pause_control:
            risks.append("Auto-rotating carousel without a pause control")
        if infinite:
            risks.append("Infinite CSS animations detected")
        if (carousels or infinite or CSS_ANIMATION.search(css)) and not reduced_motion:
            risks.append("No prefers-reduced-motion fallback found")
        if lcp_animated:
            risks.append("Hero media is animated and may delay LCP")

        return MotionSignals(
            css_animations=len(CSS_ANIMATION.findall(css)),
            css_transitions=len(CSS_TRANSITION.findall(css)),
            js_animation_hooks=js_hooks,
            scroll_reveal_elements=scroll_reveal,
            auto_carousels=carousels,
            lottie_instances=lottie,
            video_like_animations=len(autoplay_videos) + len(gifs),
            infinite_animations=infinite,
            long_duration_animations=long_durations,
            reduced_motion_support=reduced_motion,
            pause_control_present=pause_control,
            flashing_risk=False,
            lcp_element_likely_animated=lcp_animated,
            potential_risks=tuple(risks),
        )

    @staticmethod
    def _is_auto_carousel(tag: Tag) -> bool:
        if tag.get("data-ride") == "carousel":
            return True
        if not CAROUSEL_CLASS.search(_classes(tag)):
            return False
        return any(
            "autoplay" in name.lower() or name.lower() == "data-interval"
            for name in tag.attrs
        )

    # ------------------------------------------------------------------
    # UX
    # ------------------------------------------------------------------

    @staticmethod
    def _hero(soup: BeautifulSoup) -> Optional[Tag]:
        h1 = soup.find("h1")
        if h1 is None:
            return None
        return h1.find_parent(["section", "header"]) or h1.parent

    def _ux_signals(
        self,
        soup: BeautifulSoup,
        buttons: List[str],
        hover_signals: int,
        focus_signals: int,
    ) -> UXSignals:
        hero = self._hero(soup)
        hero_ctas: List[Tag] = []
        hero_elements = hero_interactive = 0
        if hero is not None:
            hero_ctas = [
                node for node in hero.find_all(["a", "button"])
                if node.name == "button"
                or BUTTON_CLASS.search(_classes(node))
                or CTA_LABEL.search(_text(node).lower())
            ]
            hero_elements = len(hero.find_all([
                "h1", "h2", "h3", "h4", "h5", "h6", "p", "a", "button",
                "img", "video", "input", "select", "textarea", "li",
            ]))
            hero_interactive = len(hero.find_all(["a", "button", "input", "select", "textarea"]))

        labels = [_text(node).lower() for node in hero_ctas] or [b.lower() for b in buttons]
        primary_ctas = [node for node in hero_ctas if PRIMARY_CLASS.search(_classes(node))]
        color_variants = {
            tuple(sorted(node.get("class") or [])) for node in hero_ctas if node.get("class")
        }

        form_fields = [
            [node for node in form.find_all(FIELD_TAGS) if _is_field(node)]
            for form in soup.find_all("form")
        ]
        requires_phone_and_email = any(
            any(self._field_kind(node) == "email" for node in fields)
            and any(self._field_kind(node) == "tel" for node in fields)
            for fields in form_fields
        )
        progress = bool(
            soup.find("progress")
            or soup.find(attrs={"role": "progressbar"})
            or soup.find(lambda tag: bool(PROGRESS_CLASS.search(_classes(tag))))
        )

        page_text = _text(soup.body or soup)
        images_alt = " ".join(img.get("alt") or "" for img in soup.find_all("img"))
        testimonials = bool(
            soup.find("blockquote")
            or soup.find(lambda tag: bool(TESTIMONIAL.search(_classes(tag) + " " + (tag.get("id") or ""))))
            or TESTIMONIAL.search(page_text)
        )
        about_or_contact = any(
            ABOUT_OR_CONTACT.search(_text(link) + " " + (link.get("href") or ""))
            for link in soup.find_all("a")
        )

        nav = soup.find("nav")
        menu_items, nav_depth, desktop_nav = self._navigation(nav)
        hamburger = bool(soup.find(
            lambda tag: bool(HAMBURGER.search(_classes(tag)))
            or (tag.name == "button" and (tag.get("aria-label") or "").strip().lower() in ("menu", "open menu", "toggle navigation"))
        ))

        h1 = soup.find("h1")
        headline = _text(h1)
        lead = h1.find_next("p") if h1 is not None else None
        value_prop = bool(VALUE_PROP.search(f"{headline} {_text(lead)}"))

        return UXSignals(
            cta_count_above_fold=len(hero_ctas),
            primary_cta_count_above_fold=len(primary_ctas),
            cta_color_variant_count_above_fold=len(color_variants),
            hero_element_count=hero_elements,
            hero_interactive_count=hero_interactive,
            h1_dominance_ratio=NEUTRAL_RATIO,
            cta_visual_dominance_ratio=NEUTRAL_RATIO,
            left_aligned_key_elements_ratio=NEUTRAL_RATIO,
            flow_reading_issue_count=0,
            vague_cta_count=sum(1 for label in labels if VAGUE_CTA.match(label)),
            benefit_cta_count=sum(1 for label in labels if BENEFIT_CTA.search(label)),
            urgency_cta_count=sum(1 for label in labels if URGENCY_CTA.search(label)),
            max_form_field_count=max((len(fields) for fields in form_fields), default=0),
            requires_phone_and_email=requires_phone_and_email,
            progress_indicator_present=progress,
            trust_badge_present=bool(TRUST_BADGE.search(f"{page_text} {images_alt}")),
            testimonials_present=testimonials,
            social_proof_present=bool(SOCIAL_PROOF.search(page_text)),
            about_or_contact_visible=about_or_contact,
            hover_feedback_signals=hover_signals,
            input_focus_signals=focus_signals,
            # Hero CTAs count as visible in the first viewport; otherwise position is unknown
            primary_cta_min_y=0.0,
            viewport_height=float(DEFAULT_VIEWPORT_HEIGHT) if hero_ctas else 0.0,
            menu_items_count=menu_items,
            nav_max_depth=nav_depth,
            has_hamburger=hamburger,
            has_visible_desktop_like_nav=desktop_nav,
            headline_length=len(headline),
            has_value_prop_hint=value_prop,
        )

    @staticmethod
    def _field_kind(node: Tag) -> str:
        kind = (node.get("type") or "").lower()
        name = f"{node.get('name') or ''} {node.get('id') or ''}".lower()
        if kind == "email" or "email" in name:
            return "email"
        if kind == "tel" or "phone" in name or "tel" in name.split():
            return "tel"
        return kind or node.name

    @staticmethod
    def _navigation(nav: Optional[Tag]):
        """(top-level item count, max nesting depth, desktop-like nav) of a <nav>."""
        if nav is None:
            return 0, 0, False

        top_list = nav.find("ul")
        if top_list is not None:
            items = len(top_list.find_all("li", recursive=False))
        else:
            items = len(nav.find_all("a"))

        depth = 0
        for ul in nav.find_all("ul"):
            depth = max(depth, 1 + len(ul.find_parents("ul")))
        if depth == 0 and items:
            depth = 1

        return items, depth, len(nav.find_all("a")) >= 3


def extract_page(url: str, html: str) -> ExtractedPage:
    """Extract one page with a default PageExtractor."""
    return PageExtractor().extract(url, html)


async def fetch_html(
    url: str,
    user_agent: str = "UX-Health-Audit-Bot/1.0",
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Fetch a page's HTML.

    Args:
        url: Page URL
        user_agent: User-Agent header
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)

    Returns:
        Response body

    Raises:
        ExtractionError: Network failure or non-2xx response
    """
    headers = {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }
    try:
        async with httpx.AsyncClient(
            timeout=timeout, follow_redirects=True, headers=headers, transport=transport
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ExtractionError(
            f"Failed to load {url}: HTTP {e.response.status_code}"
        ) from e
    except httpx.HTTPError as e:
        raise ExtractionError(f"Failed to load {url}: {str(e) or type(e).__name__}") from e

    logger.debug(f"extract.fetch url={url} status={response.status_code} bytes={len(response.content)}")
    return response.text
