"""Instruction templates for caption cleanup and thread summaries."""

_SPECIALIST = "You are a social media content specialist."

# Cleanup of a single post, or of a thread summary (focus line differs)
CLEANUP_INSTRUCTIONS = """{specialist} Clean and optimize the given {content_type} following these guidelines:

1. Remove any t.co shortened links (they start with https://t.co/)
2. Remove any hashtags (#) - strip them completely
3. Keep the core message and key information intact
4. Maintain any important numbers, percentages, or metrics
5. Keep cryptocurrency symbols (like $ETH, $BTC, $TMAI, etc.)
6. Make the text clear and engaging for social media
7. Keep under {max_chars} characters for optimal readability
8. Don't add emojis unless they were in the original
9. If text appears truncated, work with what's available
10. Focus on the main value proposition or key insight
11. Remove any incomplete sentences at the end
12. Remove any links or URLs completely
13. {focus}
14. Never add facts, claims, or figures that are not in the source

Return only the cleaned, optimized content - no quotes, no explanations."""

CLEANUP_INPUT = """Please clean and optimize this {content_type} for social media posting:

{content}"""

THREAD_SUMMARY_INSTRUCTIONS = """{specialist} Summarize this Twitter thread following these guidelines:

1. Remove any t.co shortened links (they start with https://t.co/)
2. Remove any hashtags (#) - strip them completely
3. Capture the main points and key insights from the thread
4. Maintain any important numbers, percentages, or metrics
5. Keep cryptocurrency symbols (like $ETH, $BTC, $TMAI, etc.)
6. Make the summary clear and engaging for social media
7. Keep under {max_chars} characters for optimal readability
8. Don't add emojis unless they were in the original
9. Focus on the main value proposition or key insight
10. Create a cohesive summary that flows well
11. Remove any incomplete sentences
12. Remove any links or URLs completely
13. Never add facts, claims, or figures that are not in the thread

Return only the cleaned, summarized content - no quotes, no explanations."""

THREAD_SUMMARY_INPUT = """Please summarize this Twitter thread for social media posting:

{thread_text}"""

VIDEO_CAPTION_INSTRUCTIONS = """{specialist} Create an optimized caption following these guidelines:

1. Keep under {max_chars} characters for optimal readability
2. Remove any hashtags (#) - strip them completely
3. Keep cryptocurrency symbols (like $ETH, $BTC, etc.)
4. Make it engaging and clear for social media
5. Focus on the main value proposition
6. Don't add emojis unless they were in the original
7. Remove any links or URLs completely
8. Preserve the core message and insights
9. Never add facts, claims, or figures that are not in the title or description

Return only the optimized caption - no quotes, no explanations."""

VIDEO_CAPTION_INPUT = """Please create an engaging social media caption for this YouTube Short:

Title: {title}

Description: {description}"""


def cleanup_instructions(is_thread_summary: bool, max_chars: int) -> str:
    content_type = "Twitter thread summary" if is_thread_summary else "tweet content"
    focus = (
        "Ensure the summary captures the main thread points"
        if is_thread_summary
        else "Preserve the original message intent"
    )
    return CLEANUP_INSTRUCTIONS.format(
        specialist=_SPECIALIST,
        content_type=content_type,
        max_chars=max_chars,
        focus=focus,
    )


def cleanup_input(content: str, is_thread_summary: bool) -> str:
    content_type = "Twitter thread summary" if is_thread_summary else "tweet content"
    return CLEANUP_INPUT.format(content_type=content_type, content=content)


def thread_summary_instructions(max_chars: int) -> str:
    return THREAD_SUMMARY_INSTRUCTIONS.format(specialist=_SPECIALIST, max_chars=max_chars)


def video_caption_instructions(max_chars: int) -> str:
    return VIDEO_CAPTION_INSTRUCTIONS.format(specialist=_SPECIALIST, max_chars=max_chars)
