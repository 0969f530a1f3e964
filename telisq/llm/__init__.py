"""Message, request and response types and the retry policy for chat completion APIs."""