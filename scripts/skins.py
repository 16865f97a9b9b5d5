"""
skins.py – HTML builders for the two broker sites.

``DarkGradientSkin`` renders BrokerProReviews (site1) markup and
``MinimalLightSkin`` renders Brokercompare (site2) markup.  Both produce the
same content; only classes and layout differ.  Every user-facing string
carries ``data-en`` / ``data-es`` so the client-side language toggle can swap
it.
"""

import re
from html import escape

from bs4 import BeautifulSoup

from feeds import domain_label, safe_url, to_iso_utc, truncate

TOPIC_ORDER = ("brokers", "forex", "crypto")


def esc(value) -> str:
    return escape(str(value if value is not None else ""), quote=True)


def bilingual(en: str, es: str) -> str:
    return f'data-en="{esc(en)}" data-es="{esc(es)}"'


def indent_block(block: str, spaces: int) -> str:
    pad = " " * spaces
    return "\n".join(pad + line if line.strip() else "" for line in block.splitlines())


def _date_part(iso: str) -> str:
    return (iso or "").split("T")[0]


def _source_line(src: str) -> tuple[str, str]:
    return f"Source: {src}. Open original →", f"Fuente: {src}. Abrir original →"


class DarkGradientSkin:
    name = "dark_gradient"
    brand = "BrokerProReviews"
    title_chars = 110
    source_title_chars = 120

    daily_card_pattern = re.compile(
        r'<article class="news-card" data-daily-news="true" data-daily-key="[^"]+">[\s\S]*?</article>'
    )
    weekly_card_pattern = re.compile(
        r'<article class="news-card" data-weekly-news="true" data-weekly-key="[^"]+">[\s\S]*?</article>'
    )

    section_titles = {
        "brokers": ("Broker & industry updates (LATAM)", "Actualizaciones de brokers e industria (LATAM)"),
        "forex": ("Forex & macro headlines (LATAM focus)", "Titulares de forex y macro (enfoque LATAM)"),
        "crypto": ("Crypto headlines (LATAM + global)", "Titulares cripto (LATAM + global)"),
    }

    def __init__(self, canonical_base: str = "https://brokerproreviews.com"):
        self.canonical_base = canonical_base.rstrip("/")

    # -- headline archive ---------------------------------------------------

    def rss_card(self, item: dict) -> str:
        src = domain_label(item["link"])
        title = truncate(item["title"], self.title_chars)
        en, es = _source_line(src)
        lines = [
            '<article class="news-card rss-news-card">',
            '  <div class="news-image"></div>',
            '  <div class="news-content">',
            f'    <span class="news-category" {bilingual(src, src)}>{esc(src)}</span>',
            '    <h3 class="news-title">',
            f'      <a class="link-cta" href="{esc(item["link"])}" target="_blank" rel="noopener noreferrer" '
            f'{bilingual(title, title)}>{esc(title)}</a>',
            "    </h3>",
            f'    <p class="news-excerpt" {bilingual(en, es)}>{esc(en)}</p>',
            f'    <time class="news-date" datetime="{esc(item["published_at"])}" data-relative-time="true" '
            f'data-show-absolute="true">{esc(_date_part(item["published_at"]))}</time>',
            "  </div>",
            "</article>",
        ]
        return "\n".join(lines)

    # -- daily ----------------------------------------------------------------

    def daily_card(self, key: str, href: str, stamp: str) -> str:
        title_en = f"LATAM Broker + Crypto/FX Brief — {key}"
        title_es = f"Resumen LATAM Brokers + Cripto/FX — {key}"
        excerpt_en = (
            "Today’s checklist (LATAM): confirm the regulated entity for your country, review spreads on "
            "USD/MXN & USD/BRL, check deposit/withdrawal rails, and verify whether crypto CFDs/spot are "
            "supported and restricted in your region."
        )
        excerpt_es = (
            "Checklist de hoy (LATAM): confirma la entidad regulada para tu país, revisa spreads en USD/MXN y "
            "USD/BRL, revisa depósitos/retiros y verifica si hay soporte y restricciones para cripto "
            "(CFDs/spot) en tu región."
        )
        lines = [
            f'<article class="news-card" data-daily-news="true" data-daily-key="{esc(key)}">',
            '  <div class="news-image"></div>',
            '  <div class="news-content">',
            f'    <span class="news-category" {bilingual("Daily Brief", "Resumen diario")}>Daily Brief</span>',
            '    <h3 class="news-title">',
            f'      <a class="link-cta" href="{esc(href)}" {bilingual(title_en, title_es)}>{esc(title_en)}</a>',
            "    </h3>",
            f'    <p class="news-excerpt" {bilingual(excerpt_en, excerpt_es)}>{esc(excerpt_en)}</p>',
            f'    <time class="news-date" datetime="{esc(stamp)}" data-relative-time="true" '
            f'data-show-absolute="true">{esc(key)}</time>',
            "  </div>",
            "</article>",
        ]
        return "\n".join(lines)

    def source_entry(self, item: dict) -> str:
        src = domain_label(item["link"])
        title = truncate(item["title"], self.source_title_chars)
        en, es = _source_line(src)
        note_en = (
            "Our note: Keep it practical for LATAM. Verify the exact regulated entity, fees, and withdrawal "
            "terms for your country before acting."
        )
        note_es = (
            "Nuestra nota: Manténlo práctico para LATAM. Verifica la entidad regulada exacta, comisiones y "
            "retiros para tu país antes de actuar."
        )
        lines = [
            '<div class="card-panel">',
            f'  <h3 class="subheading-card"><a class="link-cta" href="{esc(item["link"])}" target="_blank" '
            f'rel="noopener noreferrer" {bilingual(title, title)}>{esc(title)}</a></h3>',
            f'  <p class="rating-small" {bilingual(en, es)}>{esc(en)}</p>',
            f'  <time class="news-date" datetime="{esc(item["published_at"])}" data-relative-time="true" '
            f'data-show-absolute="true">{esc(_date_part(item["published_at"]))}</time>',
        ]
        snapshot = item.get("snapshot", "")
        if snapshot:
            lines.append(
                f'  <p class="section-intro section-intro-narrow" '
                f'{bilingual(f"Source snapshot: {snapshot}", f"Resumen de la fuente: {snapshot}")}>'
                f"Source snapshot: {esc(snapshot)}</p>"
            )
        lines.append(f'  <p class="section-intro section-intro-narrow" {bilingual(note_en, note_es)}>{esc(note_en)}</p>')
        lines.append("</div>")
        return "\n".join(lines)

    def _sections(self, sections: dict[str, list[dict]]) -> list[str]:
        lines: list[str] = []
        for topic in TOPIC_ORDER:
            en, es = self.section_titles[topic]
            lines.append("")
            lines.append(f'        <h2 class="section-subheading mt-5" {bilingual(en, es)}>{esc(en)}</h2>')
            entries = sections.get(topic) or []
            if not entries:
                lines.append(
                    '        <p class="rating-small" '
                    f'{bilingual("No qualifying headlines this cycle.", "Sin titulares relevantes en este ciclo.")}>'
                    "No qualifying headlines this cycle.</p>"
                )
                continue
            for item in entries:
                lines.append(indent_block(self.source_entry(item), 8))
        return lines

    def _page(self, *, canonical: str, title: str, heading: tuple[str, str], lead: tuple[str, str],
              key: str, stamp: str, sections: dict[str, list[dict]]) -> str:
        lead_en, lead_es = lead
        heading_en, heading_es = heading
        lines = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '  <meta charset="UTF-8">',
            '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
            f"  <title>{esc(title)}</title>",
            f'  <meta name="description" content="{esc(lead_en)}">',
            '  <meta name="robots" content="index,follow,max-image-preview:large,max-snippet:-1,max-video-preview:-1">',
            f'  <link rel="canonical" href="{esc(canonical)}">',
            '  <link rel="icon" href="/favicon.ico">',
            '  <meta name="theme-color" content="#0b1220">',
            '  <link rel="stylesheet" href="../../../styles.css">',
            '  <link rel="preconnect" href="https://fonts.googleapis.com">',
            '  <link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>',
            '  <link href="https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700;800&display=swap" rel="stylesheet">',
            "</head>",
            "<body>",
            '  <header class="header guide-header">',
            '    <nav class="nav guide-nav">',
            '      <div class="container">',
            '        <div class="nav-content">',
            f'          <a class="logo" href="../../../index.html" aria-label="{esc(self.brand)} home">',
            '            <span class="logo-icon">📊</span>',
            f'            <span class="logo-text">{esc(self.brand)}</span>',
            "          </a>",
            '          <div class="nav-actions">',
            f'            <a class="guide-back link-cta" href="../../../index.html#news" '
            f'{bilingual("← Back to news", "← Volver a noticias")}>← Back to news</a>',
            '            <button class="lang-toggle" id="langToggle" type="button">ES</button>',
            "          </div>",
            "        </div>",
            "      </div>",
            "    </nav>",
            "  </header>",
            "",
            '  <main class="section-pad section-pad-dark">',
            '    <div class="container">',
            '      <article class="guide-article">',
            f'        <h1 class="guide-title" {bilingual(heading_en, heading_es)}>{esc(heading_en)}</h1>',
            f'        <p class="guide-lead" {bilingual(lead_en, lead_es)}>{esc(lead_en)}</p>',
            f'        <time class="news-date" datetime="{esc(stamp)}" data-relative-time="true" '
            f'data-show-absolute="true">{esc(key)}</time>',
        ]
        lines += self._sections(sections)
        lines += [
            "      </article>",
            "    </div>",
            "  </main>",
            "",
            '  <script src="../../../translations.js"></script>',
            "</body>",
            "</html>",
        ]
        return "\n".join(lines) + "\n"

    def daily_page(self, key: str, stamp: str, sections: dict[str, list[dict]]) -> str:
        return self._page(
            canonical=f"{self.canonical_base}/news/daily/{key}/",
            title=f"Daily Brief (LATAM) — {key} | {self.brand}",
            heading=(f"Daily brief (LATAM) — {key}", f"Resumen diario (LATAM) — {key}"),
            lead=(
                "Original summaries with links to the source. Always verify the regulated entity for your "
                "country and read the primary source before acting.",
                "Resúmenes originales con enlace a la fuente. Verifica siempre la entidad regulada para tu país "
                "y lee la fuente primaria antes de actuar.",
            ),
            key=key,
            stamp=stamp,
            sections=sections,
        )

    # -- weekly ---------------------------------------------------------------

    def weekly_card(self, key: str, year: int, week: int, href: str, headline_count: int, top_title: str) -> str:
        title_en = f"Weekly Forex Brief ({self.brand}) — Week {week} ({year})"
        title_es = f"Resumen Forex Semanal ({self.brand}) — Semana {week} ({year})"
        excerpt_en = (
            f"This week’s checklist: {headline_count} curated headlines, led by “{top_title}”. "
            "Verify regulation, test withdrawals, and compare all-in costs before scaling."
        )
        excerpt_es = (
            f"Checklist de la semana: {headline_count} titulares seleccionados, encabezados por “{top_title}”. "
            "Verifica regulación, prueba retiros y compara costos totales antes de escalar."
        )
        lines = [
            f'<article class="news-card" data-weekly-news="true" data-weekly-key="{esc(key)}">',
            '  <div class="news-image"></div>',
            '  <div class="news-content">',
            f'    <span class="news-category" {bilingual("Weekly Brief", "Resumen semanal")}>Weekly Brief</span>',
            '    <h3 class="news-title">',
            f'      <a class="link-cta" href="{esc(href)}" {bilingual(title_en, title_es)}>{esc(title_en)}</a>',
            "    </h3>",
            f'    <p class="news-excerpt" {bilingual(excerpt_en, excerpt_es)}>{esc(excerpt_en)}</p>',
            '    <time class="news-date" data-relative-time="true" data-stamp-on-publish="true">Just now</time>',
            "  </div>",
            "</article>",
        ]
        return "\n".join(lines)

    def weekly_page(self, key: str, year: int, week: int, stamp: str, sections: dict[str, list[dict]]) -> str:
        return self._page(
            canonical=f"{self.canonical_base}/news/weekly/{key}/",
            title=f"Weekly Brief (LATAM) — Week {week} ({year}) | {self.brand}",
            heading=(f"Weekly brief (LATAM) — Week {week} ({year})", f"Resumen semanal (LATAM) — Semana {week} ({year})"),
            lead=(
                "The week’s broker, forex and crypto headlines that matter for LATAM traders, with links to "
                "the original sources.",
                "Los titulares de brokers, forex y cripto de la semana relevantes para traders de LATAM, con "
                "enlaces a las fuentes originales.",
            ),
            key=key,
            stamp=stamp,
            sections=sections,
        )

    def weekly_index_entry(self, key: str) -> str:
        year, week = key.split("-W")
        en = f"Weekly brief — Week {int(week)} ({year})"
        es = f"Resumen semanal — Semana {int(week)} ({year})"
        return (
            f'<div class="card-panel" data-weekly-key="{esc(key)}">\n'
            f'  <h3 class="subheading-card"><a class="link-cta" href="{esc(key)}/" {bilingual(en, es)}>{esc(en)}</a></h3>\n'
            "</div>"
        )


class MinimalLightSkin:
    name = "minimal_light"
    brand = "Brokercompare"
    title_chars = 95
    source_title_chars = 110

    daily_card_pattern = re.compile(
        r'<div class="card card-pad" data-daily-news="true" data-daily-key="[^"]+">[\s\S]*?</div>'
    )
    weekly_card_pattern = re.compile(
        r'<div class="card card-pad" data-weekly-news="true" data-weekly-key="[^"]+">[\s\S]*?</div>'
    )

    section_titles = {
        "brokers": ("Broker & industry updates", "Actualizaciones de brokers e industria"),
        "forex": ("Forex & macro", "Forex y macro"),
        "crypto": ("Crypto", "Cripto"),
    }

    def __init__(self, canonical_base: str = "https://brokercompare.com"):
        self.canonical_base = canonical_base.rstrip("/")

    def rss_card(self, item: dict) -> str:
        src = domain_label(item["link"])
        title = truncate(item["title"], self.title_chars)
        en, es = _source_line(src)
        lines = [
            '<div class="card card-pad rss-news-card">',
            '  <h3 class="card-title">',
            f'    <a class="btn-link" href="{esc(item["link"])}" target="_blank" rel="noopener noreferrer" '
            f'{bilingual(title, title)}>{esc(title)}</a>',
            "  </h3>",
            f'  <p class="muted mb-1" {bilingual(en, es)}>{esc(en)}</p>',
            f'  <time class="muted small news-date" datetime="{esc(item["published_at"])}" '
            f'data-relative-time="true" data-show-absolute="true">{esc(_date_part(item["published_at"]))}</time>',
            "</div>",
        ]
        return "\n".join(lines)

    def daily_card(self, key: str, href: str, stamp: str) -> str:
        title_en = f"Daily LATAM Broker & Crypto/FX Brief — {key}"
        title_es = f"Resumen diario LATAM (Brokers y Cripto/FX) — {key}"
        focus_en = (
            "Daily focus: LATAM broker conditions (local entity, fees, withdrawals) + forex & crypto catalysts. "
            "Open the original headlines below, and always cross-check the regulator register for your "
            "jurisdiction."
        )
        focus_es = (
            "Enfoque diario: condiciones de brokers en LATAM (entidad local, comisiones, retiros) + catalizadores "
            "de forex y cripto. Abre los titulares originales abajo y valida siempre en el registro del regulador "
            "de tu jurisdicción."
        )
        lines = [
            f'<div class="card card-pad" data-daily-news="true" data-daily-key="{esc(key)}">',
            '  <h3 class="card-title">',
            f'    <a class="btn-link" href="{esc(href)}" {bilingual(title_en, title_es)}>{esc(title_en)}</a>',
            "  </h3>",
            f'  <p class="muted mb-1" {bilingual(focus_en, focus_es)}>{esc(focus_en)}</p>',
            f'  <time class="muted small news-date" datetime="{esc(stamp)}" data-relative-time="true" '
            f'data-show-absolute="true">{esc(key)}</time>',
            "</div>",
        ]
        return "\n".join(lines)

    def source_entry(self, item: dict) -> str:
        src = domain_label(item["link"])
        title = truncate(item["title"], self.source_title_chars)
        en, es = _source_line(src)
        note_en = (
            "Our note: Compare costs and regulation for your LATAM jurisdiction, then validate the headline "
            "details on the official source."
        )
        note_es = (
            "Nuestra nota: Compara costos y regulación para tu jurisdicción en LATAM, y valida los detalles del "
            "titular en la fuente oficial."
        )
        lines = [
            '<div class="card card-pad">',
            f'  <h3 class="card-title"><a class="btn-link" href="{esc(item["link"])}" target="_blank" '
            f'rel="noopener noreferrer" {bilingual(title, title)}>{esc(title)}</a></h3>',
            f'  <p class="muted mb-1" {bilingual(en, es)}>{esc(en)}</p>',
            f'  <time class="muted small news-date" datetime="{esc(item["published_at"])}" '
            f'data-relative-time="true" data-show-absolute="true">{esc(_date_part(item["published_at"]))}</time>',
        ]
        snapshot = item.get("snapshot", "")
        if snapshot:
            lines.append(
                f'  <p class="muted" '
                f'{bilingual(f"Source snapshot: {snapshot}", f"Resumen de la fuente: {snapshot}")}>'
                f"Source snapshot: {esc(snapshot)}</p>"
            )
        lines.append(f'  <p class="muted" {bilingual(note_en, note_es)}>{esc(note_en)}</p>')
        lines.append("</div>")
        return "\n".join(lines)

    def _sections(self, sections: dict[str, list[dict]]) -> list[str]:
        lines: list[str] = []
        for idx, topic in enumerate(TOPIC_ORDER):
            en, es = self.section_titles[topic]
            spacing = "mb-2" if idx == 0 else "mb-2 mt-4"
            if idx:
                lines.append("")
            lines.append(f'        <h2 class="section-heading {spacing}" {bilingual(en, es)}>{esc(en)}</h2>')
            lines.append('        <div class="grid grid-3">')
            entries = sections.get(topic) or []
            if not entries:
                lines.append(
                    '          <p class="muted" '
                    f'{bilingual("No qualifying headlines this cycle.", "Sin titulares relevantes en este ciclo.")}>'
                    "No qualifying headlines this cycle.</p>"
                )
            for item in entries:
                lines.append(indent_block(self.source_entry(item), 10))
            lines.append("        </div>")
        return lines

    def _page(self, *, canonical: str, title: str, heading: tuple[str, str], lead: tuple[str, str],
              key: str, stamp: str, sections: dict[str, list[dict]]) -> str:
        heading_en, heading_es = heading
        lead_en, lead_es = lead
        nav = [
            ("../../../index.html#brokers", "Brokers", "Brokers"),
            ("../../../reviews/", "Reviews", "Reseñas"),
            ("../../../compare/", "Compare", "Comparar"),
            ("../../../strategies/", "Strategies", "Estrategias"),
            ("../../../index.html#tools", "Tools", "Herramientas"),
            ("../../../learn/", "Learn", "Aprender"),
            ("../../", "News", "Noticias"),
        ]
        lines = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '  <meta charset="UTF-8">',
            '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
            f"  <title>{esc(title)}</title>",
            f'  <meta name="description" content="{esc(lead_en)}">',
            f'  <link rel="canonical" href="{esc(canonical)}">',
            '  <link rel="stylesheet" href="../../../styles.css">',
            '  <link rel="preconnect" href="https://fonts.googleapis.com">',
            '  <link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>',
            '  <link href="https://fonts.googleapis.com/css2?family=Space+Grotesk:wght@300;400;500;600;700&display=swap" rel="stylesheet">',
            "</head>",
            "<body>",
            '  <header class="header">',
            '    <div class="container">',
            '      <nav class="navbar">',
            f'        <a class="logo" href="../../../index.html">{esc(self.brand)}</a>',
            '        <ul class="nav-links" id="primaryNav">',
        ]
        for href, en, es in nav:
            lines.append(f'          <li><a href="{href}" {bilingual(en, es)}>{esc(en)}</a></li>')
        lines += [
            "        </ul>",
            '        <div class="nav-right">',
            '          <button class="menu-btn" id="menuToggle" type="button" aria-controls="primaryNav" '
            f'aria-expanded="false" {bilingual("Menu", "Menú")}>Menu</button>',
            '          <button class="lang-btn" id="langToggle" type="button">ES</button>',
            "        </div>",
            "      </nav>",
            "    </div>",
            "  </header>",
            "",
            "  <main>",
            '    <section class="intro">',
            '      <div class="container">',
            f'        <h1 class="intro-title" {bilingual(heading_en, heading_es)}>{esc(heading_en)}</h1>',
            f'        <p class="intro-text" {bilingual(lead_en, lead_es)}>{esc(lead_en)}</p>',
            f'        <time class="muted small news-date" datetime="{esc(stamp)}" data-relative-time="true" '
            f'data-show-absolute="true">{esc(key)}</time>',
            "      </div>",
            "    </section>",
            "",
            '    <section class="section section--alt">',
            '      <div class="container">',
        ]
        lines += self._sections(sections)
        lines += [
            "      </div>",
            "    </section>",
            "  </main>",
            "",
            '  <script src="../../../translations.js"></script>',
            '  <script src="../../../app.js"></script>',
            "</body>",
            "</html>",
        ]
        return "\n".join(lines) + "\n"

    def daily_page(self, key: str, stamp: str, sections: dict[str, list[dict]]) -> str:
        return self._page(
            canonical=f"{self.canonical_base}/news/daily/{key}/",
            title=f"Daily LATAM Brief — {key} | {self.brand}",
            heading=(f"Daily LATAM brief — {key}", f"Resumen diario LATAM — {key}"),
            lead=(
                "Original summaries with links to sources. Verify regulation and read the primary source before "
                "acting.",
                "Resúmenes originales con enlace a las fuentes. Verifica regulación y lee la fuente primaria antes "
                "de actuar.",
            ),
            key=key,
            stamp=stamp,
            sections=sections,
        )

    def weekly_card(self, key: str, year: int, week: int, href: str, headline_count: int, top_title: str) -> str:
        title_en = f"Weekly Market Brief ({self.brand}) — Week {week} ({year})"
        title_es = f"Resumen Semanal de Mercado ({self.brand}) — Semana {week} ({year})"
        excerpt_en = (
            f"A short weekly snapshot: {headline_count} headlines worth your time, starting with “{top_title}”. "
            "Compare platforms and regulation, then test deposits/withdrawals with a small amount."
        )
        excerpt_es = (
            f"Snapshot semanal: {headline_count} titulares que valen la pena, empezando por “{top_title}”. "
            "Compara plataformas y regulación, y prueba depósitos/retiros con un monto pequeño."
        )
        lines = [
            f'<div class="card card-pad" data-weekly-news="true" data-weekly-key="{esc(key)}">',
            '  <h3 class="card-title">',
            f'    <a class="btn-link" href="{esc(href)}" {bilingual(title_en, title_es)}>{esc(title_en)}</a>',
            "  </h3>",
            f'  <p class="muted mb-1" {bilingual(excerpt_en, excerpt_es)}>{esc(excerpt_en)}</p>',
            '  <time class="muted small news-date" data-relative-time="true" data-stamp-on-publish="true">Just now</time>',
            "</div>",
        ]
        return "\n".join(lines)

    def weekly_page(self, key: str, year: int, week: int, stamp: str, sections: dict[str, list[dict]]) -> str:
        return self._page(
            canonical=f"{self.canonical_base}/news/weekly/{key}/",
            title=f"Weekly LATAM Brief — Week {week} ({year}) | {self.brand}",
            heading=(f"Weekly LATAM brief — Week {week} ({year})", f"Resumen semanal LATAM — Semana {week} ({year})"),
            lead=(
                "This week’s broker, forex and crypto headlines for LATAM, linked to the original sources.",
                "Los titulares de brokers, forex y cripto de la semana para LATAM, con enlace a las fuentes.",
            ),
            key=key,
            stamp=stamp,
            sections=sections,
        )

    def weekly_index_entry(self, key: str) -> str:
        year, week = key.split("-W")
        en = f"Weekly brief — Week {int(week)} ({year})"
        es = f"Resumen semanal — Semana {int(week)} ({year})"
        return (
            f'<div class="card card-pad" data-weekly-key="{esc(key)}">\n'
            f'  <h3 class="card-title"><a class="btn-link" href="{esc(key)}/" {bilingual(en, es)}>{esc(en)}</a></h3>\n'
            "</div>"
        )


SKINS = {
    DarkGradientSkin.name: DarkGradientSkin,
    MinimalLightSkin.name: MinimalLightSkin,
}


def get_skin(name: str, canonical_base: str | None = None):
    skin_cls = SKINS[name]
    return skin_cls(canonical_base) if canonical_base else skin_cls()


def recover_rss_items(region_html: str) -> list[dict]:
    """Read headline cards rendered by a previous run back into feed items."""
    soup = BeautifulSoup(region_html or "", "lxml")
    items: list[dict] = []
    for card in soup.select(".rss-news-card"):
        anchor = card.find("a", href=True)
        stamp = card.find("time", attrs={"datetime": True})
        if anchor is None or stamp is None:
            continue
        link = safe_url(anchor["href"])
        published_at = to_iso_utc(stamp["datetime"])
        if not link or not published_at:
            continue
        title = re.sub(r"\s+", " ", anchor.get_text(" ", strip=True)).strip()
        src = domain_label(link).lower()
        # Older cards sometimes had the source label glued to the front of the title.
        for _ in range(3):
            if title.lower().startswith(f"{src} "):
                title = title[len(src):].strip()
                continue
            break
        items.append({"title": title or link, "link": link, "published_at": published_at})
    return items
