"""
Dashboard module for Pick Risk.

The Streamlit page lives in ``app.py`` and is launched as a script, so it is
not imported here.
"""
