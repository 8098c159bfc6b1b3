# Context retrieval limits (honoured by ContextProvider implementations)
CONTEXT_FILE_LIMIT = 10
CONTEXT_SNIPPET_LENGTH = 500

# Output bounds for model responses, in tokens
MAX_CONVERSATION_TOKENS = 500
MAX_SUMMARY_TOKENS = 1000
