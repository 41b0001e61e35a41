"""JavaScript evaluated inside automated pages."""

PAGE_TOOLS_VERSION = 1

# Installed by the context init script on every new document, and re-injected
# by the transport when a page comes back without it (bfcache restore, stale context).
PAGE_TOOLS_JS = """
(() => {
  if (window.__cartPilot && window.__cartPilot.version === %(version)d) return true;
  const clean = (text) => (text || '').replace(/\\s+/g, ' ').trim();
  const texts = (selector, limit, pick) =>
    Array.from(document.querySelectorAll(selector)).map(pick).filter(Boolean).slice(0, limit);
  window.__cartPilot = {
    version: %(version)d,
    clean,
    pageSummary(limit = 10) {
      return {
        title: document.title || '',
        url: window.location.href,
        headings: texts('h1, h2, h3', limit, (h) => clean(h.textContent)),
        buttons: texts('button, input[type="button"], input[type="submit"]', limit,
          (b) => clean(b.textContent) || clean(b.value)),
        links: texts('a[href]', limit, (a) => clean(a.textContent)),
        inputs: Array.from(document.querySelectorAll('input, textarea, select')).slice(0, limit).map((input) => ({
          type: input.type || input.tagName.toLowerCase(),
          placeholder: input.placeholder || '',
          label: input.getAttribute('aria-label') || input.getAttribute('name') || '',
        })),
      };
    },
  };
  return true;
})()
""" % {'version': PAGE_TOOLS_VERSION}

TOOLS_PRESENT_JS = '() => !!(window.__cartPilot && window.__cartPilot.version === %d)' % PAGE_TOOLS_VERSION

PAGE_SUMMARY_JS = '(limit) => window.__cartPilot.pageSummary(limit)'

CLICK_JS = 'el => el.click()'

CLEAR_VALUE_JS = """el => {
  if ('value' in el) { el.value = ''; } else if (el.isContentEditable) { el.textContent = ''; }
}"""

# Insert one character and signal it, so framework-bound listeners see organic input
APPEND_CHAR_JS = """(el, ch) => {
  if ('value' in el) { el.value += ch; } else if (el.isContentEditable) { el.textContent += ch; }
  el.dispatchEvent(new Event('input', { bubbles: true }));
}"""
