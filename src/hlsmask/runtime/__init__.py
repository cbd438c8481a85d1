"""
Runtime - probing and chunk materialization (the parts that run ffmpeg).
"""
