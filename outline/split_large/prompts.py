SUBSECTION_PROMPT = """Extract the subsections of this document portion.
The text contains <physical_index_N> tags marking page boundaries; use them to cite the exact page where each subsection starts.

<parent_section>
"{title}" (pages {page_start}-{page_end})
</parent_section>

<document_content>
{content}
</document_content>

<rules>
- structure: hierarchical index such as 1.1, 1.2, 2.1.1
- title: the subsection title as written in the text
- page_start: the physical_index of the page where the subsection starts
- List subsections in reading order
</rules>

Return all subsections with their starting pages."""
