"""Application services layer.

Services coordinate the domain rules with the data store: they fetch rows,
decode them, run the domain functions and persist the result. They hold no
UI state; screens call them and turn raised errors into notifications.
"""
