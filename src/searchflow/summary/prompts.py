SYSTEM_PROMPT_TEMPLATE = (
    "You are a helpful assistant that summarizes web content. "
    "Given the content of a web page and a search query, write a factual, concise summary "
    "that focuses on the information relevant to the query. "
    "The summary must be strictly under {max_tokens} tokens. "
    "Start directly with the summary: do not add a title, heading or label such as \"Summary:\"."
)


def system_prompt(max_tokens: int) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(max_tokens=max_tokens)


def user_prompt(content: str, query: str, source_url: str) -> str:
    return (
        f"Search query: {query}\n"
        f"Source URL: {source_url}\n\n"
        "Content to summarize:\n"
        f"{content}"
    )
