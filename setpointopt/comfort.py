import math
import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .constants import (
    MET_TO_WATTS_PER_M2,
    DEFAULT_EXTERNAL_WORK,
    DEFAULT_ATMOSPHERIC_PRESSURE,
    DEFAULT_AIR_VELOCITY,
    DEFAULT_CLOTHING,
    DEFAULT_METABOLIC_RATE,
)

_LOGGER = logging.getLogger(__name__)

# --- TRUE CONSTANTS (Physical/Mathematical) ---
KELVIN_OFFSET = 273.15
PMV_LIMIT = 5.0

# PMV clothing surface temperature iteration
PMV_TOLERANCE = 1e-5
PMV_MAX_ITERATIONS = 1000
PMV_DAMPING = 0.8   # Weight kept on the previous iterate

# SET* two-node model (ASHRAE 55-2013)
SET_KCLO = 0.25
SET_BODY_WEIGHT = 69.9          # kg
SET_BODY_SURFACE_AREA = 1.8258  # m^2
SET_SBC = 5.6697e-8             # Stefan-Boltzmann (W/m^2 K^4)
SET_CSW = 170.0                 # Sweat regulation gain
SET_CDIL = 120.0                # Vasodilation gain
SET_CSTR = 0.5                  # Vasoconstriction gain
SET_LTIME = 60                  # Physiological minutes simulated
SET_TEMP_SKIN_NEUTRAL = 33.7
SET_TEMP_CORE_NEUTRAL = 36.49
SET_TEMP_BODY_NEUTRAL = 36.49
SET_SKIN_BLOOD_FLOW_NEUTRAL = 6.3
SET_SKIN_BLOOD_FLOW_BOUNDS = (0.5, 90.0)
SET_REGSW_MAX = 500.0
SET_CLOTHING_TOLERANCE = 0.01
SET_NEWTON_DELTA = 1e-4
SET_NEWTON_TOLERANCE = 0.01
SET_MAX_INNER_ITERATIONS = 1000
SET_MAX_NEWTON_ITERATIONS = 1000


class ComfortStatus(Enum):
    OK = "ok"
    INVALID_INPUT = "invalid_input"
    NOT_CONVERGED = "not_converged"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class ComfortResult:
    """
    Outcome of a comfort index calculation.
    `value` is NaN whenever `status` is not OK, so callers that only
    want a number can use float(result) and NaN-check it.
    """
    value: float
    status: ComfortStatus = ComfortStatus.OK

    @property
    def is_valid(self):
        return self.status is ComfortStatus.OK

    def __float__(self):
        return float(self.value)


def _failed(status):
    return ComfortResult(math.nan, status)


def _has_invalid_input(rh, va, clo, met):
    """Humidity, air velocity, clothing and metabolism can never be negative."""
    return rh < 0.0 or va < 0.0 or clo < 0.0 or met < 0.0


# --- PMV ---

def _vapour_pressure(ta, rh):
    """Water vapour partial pressure (Pa) from air temperature and RH (%)."""
    pk = 673.4 - 1.8 * ta
    pc = 3.2437814 + 0.00326014 * pk + 2.00658e-9 * pk ** 3
    pb = (1165.09 - pk) * (1 + 0.00121547 * pk)
    return (rh / 100.0 * 22105.8416) / math.exp(2.302585 * pk * pc / pb) * 1000.0


def _radiative_loss(fcl, tcl, tr):
    return 3.96e-8 * fcl * ((tcl + KELVIN_OFFSET) ** 4 - (tr + KELVIN_OFFSET) ** 4)


def _clothing_area_factor(icl):
    if icl > 0.5:
        return 1.05 + 0.1 * icl
    return 1.0 + 0.2 * icl


def solve_pmv(ta, rh, va, tr, icl, met, w=DEFAULT_EXTERNAL_WORK):
    """
    Fanger's Predicted Mean Vote.

    Args:
        ta: Air temperature (C).
        rh: Relative humidity (%).
        va: Air velocity (m/s).
        tr: Mean radiant temperature (C).
        icl: Clothing insulation (clo).
        met: Metabolic rate (met).
        w: External work (W/m^2).

    Returns:
        ComfortResult with the PMV in [-5, 5] when status is OK.
    """
    if _has_invalid_input(rh, va, icl, met):
        return _failed(ComfortStatus.INVALID_INPUT)

    m = met * MET_TO_WATTS_PER_M2
    pa = _vapour_pressure(ta, rh)
    fcl = _clothing_area_factor(icl)

    # Clothing surface temperature, starting from air temperature
    tcl = ta
    tcl_prev = tcl
    hc = 0.0
    try:
        for _ in range(PMV_MAX_ITERATIONS):
            tcl_prev = tcl_prev * PMV_DAMPING + tcl * (1.0 - PMV_DAMPING)
            hc = max(2.38 * abs(tcl - ta) ** 0.25, 12.1 * math.sqrt(va))
            tcl = 35.7 - 0.028 * (m - w) - 0.155 * icl * (
                _radiative_loss(fcl, tcl_prev, tr) + fcl * hc * (tcl_prev - ta))

            if math.isnan(tcl):
                _LOGGER.debug("PMV clothing temperature diverged (NaN)")
                return _failed(ComfortStatus.NOT_CONVERGED)
            if abs(tcl - tcl_prev) < PMV_TOLERANCE:
                break
        else:
            _LOGGER.debug("PMV clothing temperature did not converge in %d iterations", PMV_MAX_ITERATIONS)
            return _failed(ComfortStatus.NOT_CONVERGED)

        # Heat balance
        ed = 3.05e-3 * (5733.0 - 6.99 * (m - w) - pa)   # Skin diffusion
        es = 0.42 * ((m - w) - 58.15)                   # Sweating
        ere = 1.73e-5 * m * (5867.0 - pa)               # Latent respiration
        cre = 0.0014 * m * (34.0 - ta)                  # Dry respiration
        c = fcl * hc * (tcl - ta)                       # Convection
        r = _radiative_loss(fcl, tcl, tr)               # Radiation
    except OverflowError:
        return _failed(ComfortStatus.NOT_CONVERGED)

    load = (m - w) - ed - es - ere - cre - r - c
    pmv = load * (0.303 * math.exp(-0.036 * m) + 0.028)

    if not -PMV_LIMIT <= pmv <= PMV_LIMIT:
        return _failed(ComfortStatus.OUT_OF_RANGE)
    return ComfortResult(pmv)


def compute_pmv(ta, rh, va, tr, icl, met, w=DEFAULT_EXTERNAL_WORK):
    """PMV as a plain float; NaN for invalid input or non-convergence."""
    return solve_pmv(ta, rh, va, tr, icl, met, w).value


def compute_ppd(pmv):
    """Predicted Percentage of Dissatisfied (%) for a PMV value."""
    return 100.0 - 95.0 * math.exp(-(0.03353 * pmv ** 4 + 0.2179 * pmv ** 2))


# --- SET* ---

def saturated_vapour_pressure_torr(t):
    """Saturated vapour pressure (Torr) at temperature t (C)."""
    return math.exp(18.6686 - 4030.183 / (t + 235.0))


def solve_set(ta, rh, va, tr, clo, met, wme=DEFAULT_EXTERNAL_WORK, patm=DEFAULT_ATMOSPHERIC_PRESSURE):
    """
    Standard Effective Temperature (SET*) from the two-node model.

    Simulates one hour of physiological regulation in one-minute steps, then
    finds the temperature of the standard environment that produces the
    same skin heat loss.

    Returns:
        ComfortResult with SET* in C when status is OK.
    """
    if _has_invalid_input(rh, va, clo, met) or patm <= 0.0:
        return _failed(ComfortStatus.INVALID_INPUT)

    try:
        value = _two_node_set(ta, rh, va, tr, clo, met, wme, patm)
    except (OverflowError, ZeroDivisionError):
        _LOGGER.debug("SET* numerical breakdown for ta=%s rh=%s va=%s clo=%s met=%s", ta, rh, va, clo, met)
        return _failed(ComfortStatus.NOT_CONVERGED)

    if value is None or not math.isfinite(value):
        return _failed(ComfortStatus.NOT_CONVERGED)
    return ComfortResult(value)


def compute_set(ta, rh, va, tr, clo, met, wme=DEFAULT_EXTERNAL_WORK, patm=DEFAULT_ATMOSPHERIC_PRESSURE):
    """SET* as a plain float; NaN for invalid input or non-convergence."""
    return solve_set(ta, rh, va, tr, clo, met, wme, patm).value


def _two_node_set(ta, rh, va, tr, clo, met, wme, patm):
    """Returns SET* or None if an iteration cap is reached."""
    vapour_pressure = rh * saturated_vapour_pressure_torr(ta) / 100.0
    air_velocity = max(va, 0.1)
    temp_skin = SET_TEMP_SKIN_NEUTRAL
    temp_core = SET_TEMP_CORE_NEUTRAL
    skin_blood_flow = SET_SKIN_BLOOD_FLOW_NEUTRAL
    alfa = 0.1
    esk = 0.1 * met
    p_atm = patm * 0.009869   # kPa -> atm
    rcl = 0.155 * clo
    facl = 1.0 + 0.15 * clo
    lr = 2.2 / p_atm          # Lewis relation
    rm = met * MET_TO_WATTS_PER_M2
    m = rm

    if clo <= 0:
        wcrit = 0.38 * air_velocity ** -0.29
        icl = 1.0
    else:
        wcrit = 0.59 * air_velocity ** -0.08
        icl = 0.45

    chc = max(3.0 * p_atm ** 0.53, 8.600001 * (air_velocity * p_atm) ** 0.53)
    chr_ = 4.7
    ctc = chr_ + chc
    ra = 1.0 / (facl * ctc)
    top = (chr_ * tr + chc * ta) / ctc
    tcl = top + (temp_skin - top) / (ctc * (ra + rcl))

    dry = 0.0
    emax = 0.0
    pwet = 0.0
    for _ in range(SET_LTIME):
        # Clothing surface temperature against the radiative coefficient
        for _ in range(SET_MAX_INNER_ITERATIONS):
            tcl_old = tcl
            chr_ = 4.0 * SET_SBC * ((tcl + tr) / 2.0 + KELVIN_OFFSET) ** 3.0 * 0.72
            ctc = chr_ + chc
            ra = 1.0 / (facl * ctc)
            top = (chr_ * tr + chc * ta) / ctc
            tcl = (ra * temp_skin + rcl * top) / (ra + rcl)
            if abs(tcl - tcl_old) <= SET_CLOTHING_TOLERANCE:
                break
        else:
            _LOGGER.warning("SET* clothing temperature did not converge")
            return None

        dry = (temp_skin - top) / (ra + rcl)
        hfcs = (temp_core - temp_skin) * (5.28 + 1.163 * skin_blood_flow)
        eres = 0.0023 * m * (44.0 - vapour_pressure)
        cres = 0.0014 * m * (34.0 - ta)
        scr = m - hfcs - eres - cres - wme
        ssk = hfcs - dry - esk
        tcsk = 0.97 * alfa * SET_BODY_WEIGHT
        tccr = 0.97 * (1 - alfa) * SET_BODY_WEIGHT
        temp_skin += (ssk * SET_BODY_SURFACE_AREA) / (tcsk * 60.0)
        temp_core += scr * SET_BODY_SURFACE_AREA / (tccr * 60.0)
        temp_body = alfa * temp_skin + (1 - alfa) * temp_core

        sksig = temp_skin - SET_TEMP_SKIN_NEUTRAL
        warms = max(sksig, 0.0)
        colds = max(-sksig, 0.0)
        crsig = temp_core - SET_TEMP_CORE_NEUTRAL
        warmc = max(crsig, 0.0)
        coldc = max(-crsig, 0.0)
        warmb = max(temp_body - SET_TEMP_BODY_NEUTRAL, 0.0)

        low, high = SET_SKIN_BLOOD_FLOW_BOUNDS
        skin_blood_flow = (SET_SKIN_BLOOD_FLOW_NEUTRAL + SET_CDIL * warmc) / (1 + SET_CSTR * colds)
        skin_blood_flow = max(low, min(high, skin_blood_flow))
        regsw = min(SET_CSW * warmb * math.exp(warms / 10.7), SET_REGSW_MAX)

        ersw = 0.68 * regsw
        rea = 1.0 / (lr * facl * chc)   # Evaporative resistance of air layer
        recl = rcl / (lr * icl)         # Evaporative resistance of clothing
        emax = (saturated_vapour_pressure_torr(temp_skin) - vapour_pressure) / (rea + recl)
        prsw = ersw / emax
        pwet = 0.06 + 0.94 * prsw
        edif = pwet * emax - ersw
        if pwet > wcrit:
            pwet = wcrit
            prsw = wcrit / 0.94
            ersw = prsw * emax
            edif = 0.06 * (1.0 - prsw) * emax
        if emax < 0:
            edif = 0.0
            ersw = 0.0
            pwet = wcrit
        esk = ersw + edif

        m = rm + 19.4 * colds * coldc   # Shivering
        alfa = 0.0417737 + 0.7451833 / (skin_blood_flow + 0.585417)

    hsk = dry + esk   # Total heat loss from skin
    pssk = saturated_vapour_pressure_torr(temp_skin)

    # Standard environment
    chrs = chr_
    if met < 0.85:
        chcs = 3.0
    else:
        chcs = max(5.66 * (met - 0.85) ** 0.39, 3.0)
    ctcs = chcs + chrs
    rclos = 1.52 / ((met - wme / MET_TO_WATTS_PER_M2) + 0.6944) - 0.1835
    rcls = 0.155 * rclos
    facls = 1.0 + SET_KCLO * rclos
    fcls = 1.0 / (1.0 + 0.155 * facls * ctcs * rclos)
    ims = 0.45
    icls = ims * chcs / ctcs * (1 - fcls) / (chcs / ctcs - fcls * ims)
    ras = 1.0 / (facls * ctcs)
    reas = 1.0 / (lr * facls * chcs)
    recls = rcls / (lr * icls)
    hd_s = 1.0 / (ras + rcls)
    he_s = 1.0 / (reas + recls)

    def heat_balance_error(t):
        return hsk - hd_s * (temp_skin - t) - pwet * he_s * (pssk - 0.5 * saturated_vapour_pressure_torr(t))

    # Secant step with a fixed perturbation, starting from the lower bound
    set_old = temp_skin - hsk / hd_s
    for _ in range(SET_MAX_NEWTON_ITERATIONS):
        err1 = heat_balance_error(set_old)
        err2 = heat_balance_error(set_old + SET_NEWTON_DELTA)
        set_new = set_old - SET_NEWTON_DELTA * err1 / (err2 - err1)
        dx = set_new - set_old
        set_old = set_new
        if not math.isfinite(set_new):
            return None
        if abs(dx) <= SET_NEWTON_TOLERANCE:
            return set_new

    _LOGGER.warning("SET* Newton solve did not converge in %d iterations", SET_MAX_NEWTON_ITERATIONS)
    return None


# --- Series Helpers ---

def calculate_pmv_series(temperature, humidity, va=DEFAULT_AIR_VELOCITY, icl=DEFAULT_CLOTHING,
                         met=DEFAULT_METABOLIC_RATE, radiant_offset=1.0):
    """
    PMV for every timestep of a temperature/humidity trace.
    Mean radiant temperature is approximated as air temperature + radiant_offset.
    """
    temperature = np.asarray(temperature, dtype=float)
    humidity = np.asarray(humidity, dtype=float)
    if temperature.shape != humidity.shape:
        raise ValueError(f"Temperature/humidity shape mismatch: {temperature.shape} vs {humidity.shape}")

    pmv = np.empty(len(temperature))
    for t, (ta, rh) in enumerate(zip(temperature, humidity)):
        pmv[t] = compute_pmv(ta, rh, va, ta + radiant_offset, icl, met)

    n_invalid = int(np.isnan(pmv).sum())
    if n_invalid:
        _LOGGER.warning("%d of %d PMV values are NaN", n_invalid, len(pmv))
    return pmv


def calculate_zone_pmv(data, va=DEFAULT_AIR_VELOCITY, icl=DEFAULT_CLOTHING, met=DEFAULT_METABOLIC_RATE):
    """
    PMV per zone from a table laid out as
    [zone1 temp, zone1 humidity, zone2 temp, zone2 humidity, ...].
    Returns an array of shape (rows, zones).
    """
    data = np.asarray(data, dtype=float)
    if data.ndim != 2 or data.shape[1] % 2 != 0:
        raise ValueError(f"Zone table must have temperature/humidity column pairs, got shape {data.shape}")

    n_zones = data.shape[1] // 2
    zone_pmv = np.empty((data.shape[0], n_zones))
    for z in range(n_zones):
        zone_pmv[:, z] = calculate_pmv_series(data[:, 2 * z], data[:, 2 * z + 1], va, icl, met)
    return zone_pmv
