BATCH_VERIFY_PROMPT = """Verify whether each section title appears on its indicated page.
Do fuzzy matching, ignore minor space/formatting differences.

<sections_to_verify>
{sections}
</sections_to_verify>

For each section, determine if the title appears in the page content.
Return a verification for EACH index (0 to {last_index})."""

BATCH_VERIFY_ENTRY = """[{index}] Title: "{title}"
Page {page_number} content:
{content}
---"""


START_VERIFY_PROMPT = """For each section, check if the title appears at the BEGINNING of the page.
Answer true if the title is the first content, false if other content comes before it.

<sections>
{sections}
</sections>

Return starts_at_beginning for each index."""

START_VERIFY_ENTRY = """[{index}] Title: "{title}"
Page start: {content}"""


SINGLE_VERIFY_PROMPT = """Check if the given section title appears in the page text.
Do fuzzy matching, ignore space inconsistencies.

Section title: {title}
Page text: {content}

Answer "yes" or "no" with your confidence (0-1)."""
