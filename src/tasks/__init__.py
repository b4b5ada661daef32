"""Task modules live here.

Every module in this package is imported by the CLI; functions decorated with
`@dispatcher.task(name=..., needs=[...])` become runnable tasks.

Do not implement tasks here; keep them grouped per file.
"""
