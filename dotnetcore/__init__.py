"""dotnetcore-finalize: .NET Core buildpack finalize 阶段"""

__version__ = "0.1.0"
