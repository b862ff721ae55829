import pytest
from numpy.random import seed

from mztrace.lcms import simulation


@pytest.fixture(scope="session", autouse=True)
def random_seed():
    seed(1234)
    return


@pytest.fixture(scope="module")
def lcms_features() -> list[simulation.SimulatedLCMSFeature]:
    mz_list = [150.0, 300.0, 450.0]
    rt_list = [20.0, 50.0, 80.0]
    int_list = [1000.0, 2000.0, 3000.0]
    features = list()
    for mz, rt, spint in zip(mz_list, rt_list, int_list):
        features.append(simulation.SimulatedLCMSFeature(mz=mz, rt=rt, int=spint, width=3.0))
    return features


@pytest.fixture(scope="module")
def lcms_sample(lcms_features) -> simulation.SimulatedLCMSSample:
    config = simulation.SimulatedLCMSDataConfiguration(min_signal_intensity=1.0, n_scans=100)
    return simulation.SimulatedLCMSSample(id="sample", config=config, features=lcms_features)
