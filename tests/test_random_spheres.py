"""Tests for the random spheres scene.

Tests cover:
- Scene layout (ground first, lattice, three feature spheres last)
- Keep-clear region around the metal feature sphere
- Material draws within their documented ranges
- Reproducibility from a seed
- Camera defaults and overrides
"""

import math

import numpy as np
import pytest


class TestSceneLayout:
    """Tests for the spheres the scene contains."""

    def test_sphere_count_bounded(self):
        from src.weekend.scene.random_spheres import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=1)

        # Ground + at most 22 x 22 lattice spheres + 3 feature spheres
        assert 4 < scene.get_sphere_count() <= 1 + 22 * 22 + 3

    def test_ground_is_first(self):
        from src.weekend.scene.manager import MaterialType
        from src.weekend.scene.random_spheres import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=1)
        ground = scene.spheres[0]

        assert ground.center == (0.0, -1000.0, 0.0)
        assert ground.radius == 1000.0
        info = scene.get_material_info(ground.material_id)
        assert info.material_type == MaterialType.LAMBERTIAN
        assert info.params["albedo"] == (0.5, 0.5, 0.5)

    def test_feature_spheres_are_last(self):
        from src.weekend.scene.manager import MaterialType
        from src.weekend.scene.random_spheres import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=1)
        glass, diffuse, metal = scene.spheres[-3:]

        assert glass.center == (0.0, 1.0, 0.0)
        assert diffuse.center == (-4.0, 1.0, 0.0)
        assert metal.center == (4.0, 1.0, 0.0)
        for sphere in (glass, diffuse, metal):
            assert sphere.radius == 1.0

        assert scene.get_material_info(glass.material_id).params["ior"] == 1.5
        diffuse_info = scene.get_material_info(diffuse.material_id)
        assert diffuse_info.material_type == MaterialType.LAMBERTIAN
        assert diffuse_info.params["albedo"] == (0.4, 0.2, 0.1)
        metal_info = scene.get_material_info(metal.material_id)
        assert metal_info.material_type == MaterialType.METAL
        assert metal_info.params["fuzz"] == 0.0

    def test_small_spheres_on_lattice(self):
        from src.weekend.scene.random_spheres import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=5)

        for sphere in scene.spheres[1:-3]:
            x, y, z = sphere.center
            assert sphere.radius == 0.2
            assert y == 0.2
            assert -11.0 <= x < 10.9
            assert -11.0 <= z < 10.9

    def test_keep_clear_region_respected(self):
        from src.weekend.scene.random_spheres import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=9)

        for sphere in scene.spheres[1:-3]:
            distance = math.dist(sphere.center, (4.0, 0.2, 0.0))
            assert distance > 0.9

    def test_scene_replaces_previous_scene(self):
        from src.weekend.scene.intersection import get_sphere_count
        from src.weekend.scene.random_spheres import create_random_spheres_scene

        create_random_spheres_scene(seed=1)
        scene, _ = create_random_spheres_scene(seed=2)

        assert get_sphere_count() == scene.get_sphere_count()


class TestMaterialDraws:
    """Tests for the randomly drawn small sphere materials."""

    def test_material_parameters_in_range(self):
        from src.weekend.scene.manager import MaterialType
        from src.weekend.scene.random_spheres import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=11)
        counts = {t: 0 for t in MaterialType}

        for sphere in scene.spheres[1:-3]:
            info = scene.get_material_info(sphere.material_id)
            counts[info.material_type] += 1
            if info.material_type == MaterialType.LAMBERTIAN:
                assert all(0.0 <= c < 1.0 for c in info.params["albedo"])
            elif info.material_type == MaterialType.METAL:
                assert all(0.5 <= c < 1.0 for c in info.params["albedo"])
                assert 0.0 <= info.params["fuzz"] < 0.5
            else:
                assert info.params["ior"] == 1.5

        # Roughly 80 / 15 / 5 over several hundred spheres
        total = sum(counts.values())
        assert counts[MaterialType.LAMBERTIAN] / total > 0.7
        assert 0.05 < counts[MaterialType.METAL] / total < 0.25
        assert counts[MaterialType.DIELECTRIC] / total < 0.12

    def test_each_sphere_has_its_own_material(self):
        from src.weekend.scene.random_spheres import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=3)

        assert scene.get_material_count() == scene.get_sphere_count()


class TestReproducibility:
    """Tests for seeded scene generation."""

    def test_same_seed_same_scene(self):
        from src.weekend.scene.random_spheres import create_random_spheres_scene

        first, _ = create_random_spheres_scene(seed=1234)
        first_data = first.to_dict()
        second, _ = create_random_spheres_scene(seed=1234)

        assert second.to_dict() == first_data

    def test_different_seed_different_scene(self):
        from src.weekend.scene.random_spheres import create_random_spheres_scene

        first, _ = create_random_spheres_scene(seed=1)
        first_data = first.to_dict()
        second, _ = create_random_spheres_scene(seed=2)

        assert second.to_dict() != first_data


class TestCamera:
    """Tests for the camera returned with the scene."""

    def test_default_camera(self):
        from src.weekend.scene.random_spheres import create_random_spheres_scene

        _, camera = create_random_spheres_scene(seed=1)

        assert camera.lookfrom == (13.0, 2.0, 3.0)
        assert camera.lookat == (0.0, 0.0, 0.0)
        assert camera.vup == (0.0, 1.0, 0.0)
        assert camera.vfov == 20.0
        assert camera.aspect_ratio == pytest.approx(16.0 / 9.0)

    def test_params_override_camera(self):
        from src.weekend.scene.random_spheres import RandomSpheresParams, create_camera

        camera = create_camera(RandomSpheresParams(lookfrom=(10.0, 3.0, 5.0), aspect_ratio=1.5))

        assert camera.lookfrom == (10.0, 3.0, 5.0)
        assert camera.aspect_ratio == 1.5

    def test_camera_loads(self):
        from src.weekend.camera.pinhole import get_camera_info, setup_camera
        from src.weekend.scene.random_spheres import create_random_spheres_scene

        _, camera = create_random_spheres_scene(seed=1)
        setup_camera(camera)
        info = get_camera_info()

        assert np.allclose(info["origin"], (13.0, 2.0, 3.0), atol=1e-5)
        expected_w = np.array([13.0, 2.0, 3.0]) / np.linalg.norm([13.0, 2.0, 3.0])
        assert np.allclose(info["w"], expected_w, atol=1e-5)


class TestRender:
    """Smoke test that the scene renders."""

    def test_small_render(self):
        from src.weekend.camera.pinhole import setup_camera
        from src.weekend.core.progressive import FrameRenderer, RenderSettings
        from src.weekend.scene.random_spheres import RandomSpheresParams, create_random_spheres_scene

        _, camera = create_random_spheres_scene(RandomSpheresParams(aspect_ratio=2.0), seed=1)
        setup_camera(camera)

        renderer = FrameRenderer(16, 8, RenderSettings(samples_per_pixel=2, max_depth=5))
        assert renderer.render()

        pixels = renderer.get_pixels()
        assert (pixels[:, :, 3] == 255).all()
        assert len(np.unique(pixels[:, :, :3].reshape(-1, 3), axis=0)) > 1
