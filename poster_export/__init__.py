"""
Poster capture and export package.

Modules:
- layouts: the four posters, interactive or static, and the off-screen render target
- capture: static poster -> raster surface at a resolution multiplier
- export: ordered capture, paced downloads and banner delivery
- banner: side-by-side stitching of captured posters
- controller: busy flag and failure notice around one export run
- assets: local asset lookup and remote picture fetching
- render: Pillow rasterization helpers
"""
