"""Taichi-based Monte Carlo path tracer core.

This package computes converged RGB images by stochastically sampling light
paths through a scene of spheres, with support for:
- Diffuse (Lambertian), fuzzy metal and dielectric (glass) materials
- A pinhole camera with jittered anti-aliasing
- An iterative path integrator with sky illumination
- A multithreaded tiled renderer with row progress reporting

Subpackages:
    core: Rays, vectors, random streams, intervals, integrator and renderer
    geometry: Sphere primitive and hit records
    materials: Scattering models and their material registries
    scene: Scene storage, material handles and preset scenes
    camera: Pinhole camera with ray generation
    preview: Framebuffer presentation helpers
"""

__version__ = "0.1.0"
