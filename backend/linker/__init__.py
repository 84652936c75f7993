"""
vodlinker: correlates a YouTube livestream window with stat.ink battle and
Salmon Run uploads, links each upload to its moment in the stream, and
renders an optional Salmon Run summary for the video description.
"""
