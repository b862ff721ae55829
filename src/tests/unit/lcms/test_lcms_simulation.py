import numpy as np
import pytest

from mztrace.lcms import simulation


@pytest.fixture
def sample_with_grid(lcms_sample: simulation.SimulatedLCMSSample):
    sample = lcms_sample.model_copy(deep=True)
    sample.config.grid = simulation.MZGridSpecification()
    return sample


class TestSimulatedLCMSFeature:
    def test_height_at_rt_is_feature_intensity(self):
        ft = simulation.SimulatedLCMSFeature(mz=100.0, rt=10.0, int=500.0)
        assert ft.get_height(10.0) == pytest.approx(500.0)

    def test_height_is_symmetric(self):
        ft = simulation.SimulatedLCMSFeature(mz=100.0, rt=10.0, int=500.0)
        assert ft.get_height(7.0) == pytest.approx(ft.get_height(13.0))
        assert ft.get_height(7.0) < ft.int


class TestSimulatedLCMSSample:
    def test_make_grid_from_features(self, lcms_sample: simulation.SimulatedLCMSSample):
        grid = lcms_sample.make_grid()
        assert grid.size == len(lcms_sample.features)
        assert np.all(np.diff(grid) > 0.0)

    def test_make_grid_from_grid_configuration(self, sample_with_grid: simulation.SimulatedLCMSSample):
        grid = sample_with_grid.make_grid()
        assert sample_with_grid.config.grid is not None
        assert grid.size == sample_with_grid.config.grid.size
        assert np.all(np.diff(grid) > 0.0)

    def test_make_grid_no_features_return_empty_array(self):
        sample = simulation.SimulatedLCMSSample()
        grid = sample.make_grid()
        assert grid.size == 0

    def test_json_serialization(self, tmp_path, lcms_sample: simulation.SimulatedLCMSSample):
        path = tmp_path / "sample.json"
        lcms_sample.to_json(path)
        actual = simulation.SimulatedLCMSSample.from_json(path)
        assert actual == lcms_sample


class TestScanSimulator:
    def test_invalid_index_raises_error(self, lcms_sample):
        simulator = simulation.ScanSimulator(lcms_sample)
        with pytest.raises(ValueError):
            simulator.simulate(lcms_sample.config.n_scans)

    def test_scan_from_sample_without_features_is_empty(self):
        simulator = simulation.ScanSimulator(simulation.SimulatedLCMSSample())
        sp = simulator.simulate(0)
        assert sp.mz.size == 0

    def test_grid_produces_profile_scans(self, sample_with_grid):
        sp = simulation.ScanSimulator(sample_with_grid).simulate(20)
        assert not sp.centroid
        assert sp.mz.size > 0

    def test_scans_are_reproducible(self, lcms_sample):
        sample = lcms_sample.model_copy(deep=True)
        sample.config.mz_noise = 0.001
        sample.config.amp_noise = 5.0
        sp1 = simulation.ScanSimulator(sample).simulate(20)
        sp2 = simulation.ScanSimulator(sample).simulate(20)
        assert np.array_equal(sp1.mz, sp2.mz)
        assert np.array_equal(sp1.int, sp2.int)

    def test_seed_changes_noise(self, lcms_sample):
        sample = lcms_sample.model_copy(deep=True)
        sample.config.mz_noise = 0.001
        other = sample.model_copy(deep=True)
        other.config.seed = 1
        sp1 = simulation.ScanSimulator(sample).simulate(20)
        sp2 = simulation.ScanSimulator(other).simulate(20)
        assert not np.array_equal(sp1.mz, sp2.mz)

    def test_dropped_scan_is_empty(self, lcms_sample):
        sample = lcms_sample.model_copy(deep=True)
        sample.config.dropped_scans = [20]
        sp = simulation.ScanSimulator(sample).simulate(20)
        assert sp.mz.size == 0
        assert sp.time == pytest.approx(20.0)


class TestSimulatedLCMSDataReader:
    @pytest.fixture
    def reader(self, lcms_sample):
        return simulation.SimulatedLCMSDataReader(lcms_sample)

    def test_invalid_source_raises_error(self):
        with pytest.raises(ValueError):
            simulation.SimulatedLCMSDataReader("sample.mzML")  # type: ignore

    def test_get_n_spectra(self, reader, lcms_sample):
        assert reader.get_n_spectra() == lcms_sample.config.n_scans

    def test_spectrum_time(self, reader, lcms_sample):
        index = 15
        sp = reader.get_spectrum(index)
        assert sp.index == index
        assert sp.time == pytest.approx(index * lcms_sample.config.time_resolution)

    def test_spectrum_intensity_is_maximum_at_feature_rt(self, reader, lcms_features):
        ft = lcms_features[0]
        sp = reader.get_spectrum(int(ft.rt))
        index = np.argmin(np.abs(sp.mz - ft.mz))
        assert sp.int[index] == pytest.approx(ft.int)

    def test_low_intensity_signals_are_removed(self, reader, lcms_sample):
        sp = reader.get_spectrum(0)
        assert np.all(sp.int >= lcms_sample.config.min_signal_intensity)

    def test_mz_noise_keeps_mz_sorted(self, lcms_sample):
        sample = lcms_sample.model_copy(deep=True)
        sample.config.mz_noise = 0.001
        reader = simulation.SimulatedLCMSDataReader(sample)
        for k in range(sample.config.n_scans):
            sp = reader.get_spectrum(k)
            assert np.all(np.diff(sp.mz) > 0.0)
