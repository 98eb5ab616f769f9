# src/auditor/rules/color_contrast.py
from typing import Dict, List, Optional, Set, Tuple

from action_ir.markup import MarkupElement
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.model import Issue, IssueFix, Severity
from auditor.utils.color import (
    BLACK,
    DEFAULT_FONT_SIZE_PX,
    WHITE,
    Color,
    contrast_ratio,
    parse_color,
    parse_font_size,
    parse_font_weight,
    relative_luminance,
)

NORMAL_TEXT_RATIO = 4.5
LARGE_TEXT_RATIO = 3.0
LARGE_TEXT_SIZE_PX = 18
LARGE_TEXT_BOLD_SIZE_PX = 14
MIN_ALPHA = 0.8

NON_TEXT_TAGS = ("img", "video", "audio", "canvas", "svg")
BOLD_TAGS = ("b", "strong")

REASON_MESSAGES = {
    "background-image-or-gradient": "background has image or gradient",
    "z-index-detected": "z-index detected in ancestor tree before solid background",
    "color-transition": "text color has transition or animation",
    "background-transition": "background color has transition or animation",
    "low-opacity-text": "text opacity is too low (< 80%)",
    "low-opacity-background": "background opacity is too low (< 80%)",
}

# (color, None) when reliable, (None, reason) otherwise.
ColorResult = Tuple[Optional[Color], Optional[str]]


def _transitioned_properties(styles: Dict[str, str]) -> Set[str]:
    props = set()
    for part in styles.get("transition", "").split(","):
        tokens = part.split()
        if tokens:
            # "transition: 0.3s ease" with no property name animates everything.
            first = tokens[0].lower()
            props.add("all" if first[0].isdigit() or first[0] == "." else first)
    props.update(p.strip().lower() for p in styles.get("transition-property", "").split(",") if p.strip())
    return props


def _has_transition(styles: Dict[str, str], prop: str) -> bool:
    props = _transitioned_properties(styles)
    if prop in props or "all" in props:
        return True
    return "animation" in styles


def _opacity(styles: Dict[str, str]) -> float:
    try:
        return float(styles.get("opacity", "1").strip())
    except ValueError:
        return 1.0


def _foreground(element: MarkupElement, styles: Dict[str, str]) -> ColorResult:
    if _opacity(styles) < MIN_ALPHA:
        return None, "low-opacity-text"
    raw = styles.get("color")
    if raw:
        color = parse_color(raw)
        if color is not None:
            if _has_transition(styles, "color"):
                return None, "color-transition"
            if color.a < MIN_ALPHA:
                return None, "low-opacity-text"
            return color, None
    if _has_transition(styles, "color"):
        return None, "color-transition"
    class_attr = element.attributes.get("class", "")
    if "transition" in class_attr or "animate" in class_attr:
        return None, "color-transition"
    return BLACK, None


def _background(element: MarkupElement, computed) -> ColorResult:
    """Walks up from the element to the first solid background; white at the root."""
    for node in [element, *element.ancestors()]:
        styles = computed(node)
        if "z-index" in styles:
            return None, "z-index-detected"
        if node is not element and _opacity(styles) < MIN_ALPHA:
            return None, "low-opacity-background"

        image = styles.get("background-image", "")
        shorthand = styles.get("background", "")
        if "url(" in image or "url(" in shorthand or any("gradient(" in v for v in styles.values()):
            return None, "background-image-or-gradient"

        raw = styles.get("background-color")
        if raw:
            color = parse_color(raw)
            if color is not None:
                if _has_transition(styles, "background-color"):
                    return None, "background-transition"
                if 0 < color.a < MIN_ALPHA:
                    return None, "low-opacity-background"
                if color.a == 1:
                    return color, None

        if shorthand:
            color = parse_color(shorthand)
            if color is not None and color.a == 1:
                return color, None
    return WHITE, None


def _is_large_text(element: MarkupElement, styles: Dict[str, str]) -> bool:
    size = parse_font_size(styles["font-size"]) if "font-size" in styles else DEFAULT_FONT_SIZE_PX
    default_weight = 700 if element.tag in BOLD_TAGS else 400
    weight = parse_font_weight(styles["font-weight"], default_weight) if "font-weight" in styles else default_weight
    return size >= LARGE_TEXT_SIZE_PX or (size >= LARGE_TEXT_BOLD_SIZE_PX and weight >= 700)


def _is_text_candidate(context: AuditContext, element: MarkupElement) -> bool:
    if not (element.text_content and element.text_content.strip()):
        return False
    if element.tag in NON_TEXT_TAGS:
        return False
    if element.attributes.get("aria-hidden") == "true":
        return False
    return not context.document_model.style.is_element_hidden(element)


def _snippet(element: MarkupElement) -> str:
    return element.text_content.strip()[:50] or "text content"


@audit_spec(codes=["contrast-indeterminate", "insufficient-contrast"])
def check_text_contrast(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """
    Text contrast against the nearest solid background (WCAG AA).

    Backgrounds that cannot be resolved statically (images, gradients,
    stacking contexts, animations, translucency) yield a warning asking for
    manual verification instead of a computed ratio.
    """
    if not context.has_markup:
        return []

    doc = context.document_model
    computed = doc.style.computed_declarations
    issues = []

    for element in doc.get_all_elements():
        if not _is_text_candidate(context, element):
            continue
        styles = computed(element)

        fg, reason = _foreground(element, styles)
        layer = "Text color"
        bg = None
        if fg is not None:
            bg, reason = _background(element, computed)
            layer = "Background"

        if reason is not None:
            explanation = REASON_MESSAGES.get(reason, reason)
            issues.append(factory.create(
                context,
                "contrast-indeterminate",
                Severity.WARNING,
                f"Color contrast cannot be reliably calculated: {explanation}. {layer} is indeterminate. "
                f"Manual verification required - ensure text has sufficient contrast "
                f"(4.5:1 for normal text, 3:1 for large text).",
                element.location,
                ["1.4.3"],
                element_context=doc.get_element_context(element),
                fix=IssueFix(
                    description=f'Manually verify contrast for: "{_snippet(element)}" ({explanation})',
                    code="text-shadow: 2px 2px 4px rgba(0, 0, 0, 0.8); /* or a solid overlay behind the text */",
                    location=element.location,
                ),
            ))
            continue

        large = _is_large_text(element, styles)
        required = LARGE_TEXT_RATIO if large else NORMAL_TEXT_RATIO
        ratio = contrast_ratio(fg, bg)
        if ratio >= required:
            continue

        text_type = "large text" if large else "normal text"
        suggested = "#000000" if relative_luminance(bg) > 0.5 else "#FFFFFF"
        issues.append(factory.create(
            context,
            "insufficient-contrast",
            Severity.ERROR,
            f"Insufficient color contrast: {ratio:.2f}:1 (requires {required}:1 for {text_type}). "
            f'Text "{_snippet(element)}" may be difficult to read for users with low vision. '
            f"Foreground: {fg.css()}, Background: {bg.css()}.",
            element.location,
            ["1.4.3"],
            element_context=doc.get_element_context(element),
            fix=IssueFix(
                description=f"Improve contrast for \"{_snippet(element)}\": {ratio:.2f}:1, required {required}:1",
                code=f"color: {suggested};\nbackground-color: {bg.css()};",
                location=element.location,
            ),
        ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="color-contrast",
    description="Detects insufficient text contrast and flags contrast that cannot be determined statically",
    audit_rules=[check_text_contrast],
)
