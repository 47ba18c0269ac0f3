LOCATE_SECTION_PROMPT = """Find which page contains the start of the given section.
Pages are marked with <physical_index_N> tags.

Section title: {title}

<document_pages>
{content}
</document_pages>

Return the physical_index number where this section starts as page_number, or null if it does not start in these pages."""
