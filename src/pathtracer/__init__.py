"""Taichi path tracer for scenes of analytic spheres.

This package renders sphere scenes with stochastic path tracing on the CPU or
GPU using Taichi, with support for:
- Jittered anti-aliasing and thin-lens depth of field
- Diffuse (Lambertian), fuzzy metal and dielectric (glass) materials
- Depth-bounded iterative light transport with a sky gradient background
- Plain-text PPM (P3) and PNG output

Subpackages:
    core: Ray and vector utilities, the color integrator, and the renderer
    geometry: Sphere primitive and ray-sphere intersection
    materials: Scattering models (Lambertian, metal, dielectric)
    scene: Scene storage, closest-hit queries, scene manager and presets
    camera: Camera configuration, derivation and ray generation
    preview: Gamma correction and image serialization
"""

__version__ = "0.1.0"
