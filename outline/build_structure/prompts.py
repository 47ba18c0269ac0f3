TOC_DETECTION_PROMPT = """<role>
You are an expert at detecting the Table of Contents in documents.
</role>

<workflow>
1. Review the sample pages below
2. Optionally use the analyze_page tool to check additional pages
3. Submit the result
</workflow>

<rules>
- has_toc: true if the document has a table of contents, false otherwise
- toc_end_page: the page where the table of contents ends (only if has_toc is true)
- entries: every entry with title, page_number and level
- level: 0 = main chapters, 1 = sub-sections, 2 = sub-sub-sections
- page_number: the page number as shown in the table of contents
- If there is no table of contents, return has_toc=false and an empty entries list
</rules>

<sample_pages>
{sample_pages}
</sample_pages>

Return whether a table of contents was found and extract all of its entries."""


STRUCTURE_PROMPT = """<role>
You are an expert at analyzing document structure. Extract the hierarchical structure of this {total_pages}-page document.
</role>
{toc_context}
<workflow>
1. Review the sample pages below
2. Optionally use the read_page tool to examine additional pages
3. Submit the structure
</workflow>

<rules>
- title: the main document title
- sections: the main sections/chapters in reading order
- level: 1 = main chapters, 2 = subsections, 3 = sub-subsections
- page_start/page_end: must be between 1 and {total_pages}, page_end >= page_start
- children: optional list of subsections
</rules>

<sample_pages>
{sample_pages}
</sample_pages>

Return the complete document structure with title, sections and page ranges."""


def build_toc_context(entries) -> str:
    if not entries:
        return ""
    lines = [f"{'  ' * e.level}- {e.title} (page {e.page_number})" for e in entries]
    return "\n<detected_table_of_contents>\n" + "\n".join(lines) + "\n</detected_table_of_contents>\n"
