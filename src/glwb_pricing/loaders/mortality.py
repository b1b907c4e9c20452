"""
Tabular mortality data.

Provides SOA 2012 IAM annuitant tables and derived tables as ``age -> qx``
callables, interchangeable with the parametric curves in
:mod:`glwb_pricing.glwb.mortality`.

Theory
------
[T1] qx = probability of death between age x and x+1
[T1] npx = p_x × p_{x+1} × ... × p_{x+n-1} = n-year survival
[T1] e_x = Σ_{k≥1} kpx = curtate life expectancy
"""

from dataclasses import dataclass
from typing import Literal

import numpy as np

from glwb_pricing.glwb.mortality import GompertzMakehamMortality, life_expectancy, survival_probability


# SOA 2012 IAM Basic Table - Male
# Source: Society of Actuaries, 2012 Individual Annuity Reserving Table
# These are representative values; actual table has more decimal precision
SOA_2012_IAM_MALE_QX: dict[int, float] = {
    0: 0.00066, 1: 0.00044, 2: 0.00029, 3: 0.00023, 4: 0.00018,
    5: 0.00016, 6: 0.00015, 7: 0.00014, 8: 0.00013, 9: 0.00012,
    10: 0.00012, 11: 0.00013, 12: 0.00016, 13: 0.00022, 14: 0.00031,
    15: 0.00041, 16: 0.00052, 17: 0.00063, 18: 0.00073, 19: 0.00080,
    20: 0.00084, 21: 0.00087, 22: 0.00088, 23: 0.00089, 24: 0.00089,
    25: 0.00088, 26: 0.00088, 27: 0.00088, 28: 0.00089, 29: 0.00091,
    30: 0.00093, 31: 0.00096, 32: 0.00100, 33: 0.00104, 34: 0.00109,
    35: 0.00115, 36: 0.00121, 37: 0.00129, 38: 0.00137, 39: 0.00147,
    40: 0.00158, 41: 0.00170, 42: 0.00184, 43: 0.00199, 44: 0.00216,
    45: 0.00235, 46: 0.00256, 47: 0.00280, 48: 0.00306, 49: 0.00336,
    50: 0.00369, 51: 0.00405, 52: 0.00446, 53: 0.00491, 54: 0.00542,
    55: 0.00598, 56: 0.00661, 57: 0.00731, 58: 0.00809, 59: 0.00897,
    60: 0.00994, 61: 0.01103, 62: 0.01224, 63: 0.01360, 64: 0.01511,
    65: 0.01680, 66: 0.01868, 67: 0.02079, 68: 0.02315, 69: 0.02580,
    70: 0.02876, 71: 0.03208, 72: 0.03580, 73: 0.03997, 74: 0.04464,
    75: 0.04988, 76: 0.05574, 77: 0.06231, 78: 0.06966, 79: 0.07790,
    80: 0.08712, 81: 0.09745, 82: 0.10901, 83: 0.12194, 84: 0.13638,
    85: 0.15249, 86: 0.17043, 87: 0.19037, 88: 0.21248, 89: 0.23691,
    90: 0.26379, 91: 0.29323, 92: 0.32532, 93: 0.36011, 94: 0.39759,
    95: 0.43769, 96: 0.48025, 97: 0.52503, 98: 0.57171, 99: 0.61989,
    100: 0.66912, 101: 0.71888, 102: 0.76861, 103: 0.81769, 104: 0.86551,
    105: 0.91142, 106: 0.95479, 107: 0.99500, 108: 1.00000, 109: 1.00000,
    110: 1.00000, 111: 1.00000, 112: 1.00000, 113: 1.00000, 114: 1.00000,
    115: 1.00000, 116: 1.00000, 117: 1.00000, 118: 1.00000, 119: 1.00000,
    120: 1.00000,
}

# SOA 2012 IAM Basic Table - Female
# Generally lower mortality than male
SOA_2012_IAM_FEMALE_QX: dict[int, float] = {
    0: 0.00055, 1: 0.00037, 2: 0.00024, 3: 0.00019, 4: 0.00015,
    5: 0.00013, 6: 0.00012, 7: 0.00011, 8: 0.00011, 9: 0.00010,
    10: 0.00010, 11: 0.00011, 12: 0.00013, 13: 0.00017, 14: 0.00022,
    15: 0.00027, 16: 0.00032, 17: 0.00036, 18: 0.00039, 19: 0.00041,
    20: 0.00042, 21: 0.00043, 22: 0.00044, 23: 0.00045, 24: 0.00046,
    25: 0.00047, 26: 0.00048, 27: 0.00050, 28: 0.00052, 29: 0.00055,
    30: 0.00058, 31: 0.00062, 32: 0.00066, 33: 0.00071, 34: 0.00077,
    35: 0.00083, 36: 0.00090, 37: 0.00098, 38: 0.00107, 39: 0.00117,
    40: 0.00128, 41: 0.00140, 42: 0.00154, 43: 0.00169, 44: 0.00185,
    45: 0.00203, 46: 0.00223, 47: 0.00245, 48: 0.00269, 49: 0.00296,
    50: 0.00325, 51: 0.00357, 52: 0.00393, 53: 0.00432, 54: 0.00475,
    55: 0.00523, 56: 0.00576, 57: 0.00635, 58: 0.00700, 59: 0.00773,
    60: 0.00854, 61: 0.00944, 62: 0.01044, 63: 0.01156, 64: 0.01281,
    65: 0.01420, 66: 0.01576, 67: 0.01750, 68: 0.01946, 69: 0.02165,
    70: 0.02411, 71: 0.02688, 72: 0.02999, 73: 0.03349, 74: 0.03743,
    75: 0.04186, 76: 0.04683, 77: 0.05242, 78: 0.05869, 79: 0.06573,
    80: 0.07361, 81: 0.08245, 82: 0.09234, 83: 0.10341, 84: 0.11578,
    85: 0.12960, 86: 0.14502, 87: 0.16220, 88: 0.18130, 89: 0.20246,
    90: 0.22582, 91: 0.25150, 92: 0.27960, 93: 0.31019, 94: 0.34330,
    95: 0.37893, 96: 0.41701, 97: 0.45741, 98: 0.49994, 99: 0.54433,
    100: 0.59025, 101: 0.63732, 102: 0.68510, 103: 0.73315, 104: 0.78099,
    105: 0.82815, 106: 0.87414, 107: 0.91849, 108: 0.96073, 109: 1.00000,
    110: 1.00000, 111: 1.00000, 112: 1.00000, 113: 1.00000, 114: 1.00000,
    115: 1.00000, 116: 1.00000, 117: 1.00000, 118: 1.00000, 119: 1.00000,
    120: 1.00000,
}


@dataclass
class MortalityTable:
    """
    Mortality table representation.

    Callable as ``table(age) -> qx`` so it can drive the simulator directly.

    Attributes
    ----------
    table_name : str
        Table identifier (e.g., "SOA 2012 IAM")
    min_age : int
        Minimum age in table
    max_age : int
        Maximum age (omega)
    qx : ndarray
        Mortality rates by age
    gender : str
        "male", "female", or "unisex"
    """

    table_name: str
    min_age: int
    max_age: int
    qx: np.ndarray
    gender: str

    def __post_init__(self) -> None:
        """Validate table data."""
        expected_len = self.max_age - self.min_age + 1
        if len(self.qx) != expected_len:
            raise ValueError(
                f"qx array length ({len(self.qx)}) must equal "
                f"max_age - min_age + 1 ({expected_len})"
            )
        if not np.all((self.qx >= 0) & (self.qx <= 1)):
            raise ValueError("All qx values must be in [0, 1]")

    def __call__(self, age: int) -> float:
        return self.get_qx(age)

    def get_qx(self, age: int) -> float:
        """
        Get mortality rate at age.

        Examples
        --------
        >>> MortalityLoader().soa_2012_iam().get_qx(65)
        0.0168
        """
        if age < self.min_age:
            raise ValueError(f"Age {age} below minimum age {self.min_age}")
        if age > self.max_age:
            return 1.0  # Certain death beyond omega
        return float(self.qx[age - self.min_age])

    def get_px(self, age: int) -> float:
        """[T1] px = 1 - qx"""
        return 1.0 - self.get_qx(age)

    def npx(self, age: int, n: int) -> float:
        """n-year survival probability from ``age``."""
        if n <= 0:
            return 1.0
        return survival_probability(age, n, self.get_qx)

    def life_expectancy(self, age: int) -> float:
        """Curtate life expectancy at ``age``."""
        return life_expectancy(age, self.get_qx, max_age=self.max_age + 1)


class MortalityLoader:
    """
    Builds mortality tables.

    Examples
    --------
    >>> loader = MortalityLoader()
    >>> table = loader.soa_2012_iam(gender="male")
    >>> qx_65 = table.get_qx(65)
    """

    def soa_2012_iam(
        self,
        gender: Literal["male", "female"] = "male",
    ) -> MortalityTable:
        """
        Load SOA 2012 IAM basic table.

        Parameters
        ----------
        gender : str
            "male" or "female"

        Returns
        -------
        MortalityTable
            SOA 2012 IAM table
        """
        if gender == "male":
            qx_dict = SOA_2012_IAM_MALE_QX
        elif gender == "female":
            qx_dict = SOA_2012_IAM_FEMALE_QX
        else:
            raise ValueError(f"Gender must be 'male' or 'female', got {gender}")

        return self.from_dict(
            qx_dict,
            table_name=f"SOA 2012 IAM Basic - {gender.title()}",
            gender=gender,
        )

    def from_dict(
        self,
        qx_dict: dict[int, float],
        table_name: str = "Custom",
        gender: str = "unisex",
    ) -> MortalityTable:
        """
        Create table from an ``age -> qx`` mapping.

        Missing interior ages are filled by linear interpolation.

        Examples
        --------
        >>> table = MortalityLoader().from_dict({65: 0.02, 67: 0.024})
        >>> round(table.get_qx(66), 6)
        0.022
        """
        if not qx_dict:
            raise ValueError("qx_dict cannot be empty")
        ages = sorted(qx_dict.keys())
        min_age, max_age = ages[0], ages[-1]

        all_ages = np.arange(min_age, max_age + 1)
        qx = np.interp(all_ages, ages, [qx_dict[a] for a in ages])

        return MortalityTable(
            table_name=table_name,
            min_age=min_age,
            max_age=max_age,
            qx=qx,
            gender=gender,
        )

    def gompertz_makeham(
        self,
        model: GompertzMakehamMortality,
        min_age: int = 0,
        table_name: str = "Gompertz-Makeham",
        gender: str = "unisex",
    ) -> MortalityTable:
        """
        Tabulate a parametric Gompertz-Makeham curve up to its terminal age.
        """
        ages = range(min_age, model.terminal_age + 1)
        return MortalityTable(
            table_name=table_name,
            min_age=min_age,
            max_age=model.terminal_age,
            qx=np.array([model(age) for age in ages]),
            gender=gender,
        )

    def with_improvement(
        self,
        base_table: MortalityTable,
        improvement_rate: float = 0.01,
        projection_years: int = 0,
    ) -> MortalityTable:
        """
        Apply mortality improvement factors.

        [T1] qx_improved = qx × (1 - improvement_rate)^years

        Terminal rates of 1.0 are kept so the table still closes.
        """
        if not 0 <= improvement_rate < 1:
            raise ValueError(f"improvement_rate must be in [0, 1), got {improvement_rate}")
        if projection_years <= 0:
            return base_table

        improvement_factor = (1 - improvement_rate) ** projection_years
        improved_qx = np.where(base_table.qx >= 1.0, 1.0, base_table.qx * improvement_factor)

        return MortalityTable(
            table_name=f"{base_table.table_name} + {projection_years}yr improvement",
            min_age=base_table.min_age,
            max_age=base_table.max_age,
            qx=improved_qx,
            gender=base_table.gender,
        )
