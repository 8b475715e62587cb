"""
optcore — детерминированное ядро ценообразования опционов

- core.math: арифметика с фиксированной точкой (1e18 / 1e27), sqrt/ln/exp, N(x)
- pricing: модель Блэка-Шоулза (цены, дельта, вега, стандартизованная вега)
- oracle: геометрическое средневзвешенное по времени (GWAV) на кольцевом буфере
"""

__version__ = "0.1.0"
