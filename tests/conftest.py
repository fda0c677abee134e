import numpy as np
import pytest

from cwdecode.synth import synthesize

SAMPLE_RATE = 8000

# 20 WPM at 8 kHz: 60 ms unit = 480 samples = 6 windows of 10 ms
SOS_WPM = 20
SOS_UNIT_WINDOWS = 6

CQ_TEXT = "CQ CQ CQ DE W2ASM K"


@pytest.fixture
def sos_clean():
    return SAMPLE_RATE, synthesize("SOS", wpm=SOS_WPM, tone_hz=600, sample_rate=SAMPLE_RATE)


@pytest.fixture
def cq_noisy():
    audio = synthesize(CQ_TEXT, wpm=12, tone_hz=600, sample_rate=SAMPLE_RATE, snr_db=10, seed=48)
    return SAMPLE_RATE, audio


@pytest.fixture
def silence():
    return SAMPLE_RATE, np.zeros(SAMPLE_RATE * 2)
